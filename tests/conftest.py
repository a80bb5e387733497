import os

# Settings are read at import time, so the environment has to be ready first.
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT"] = "1000/minute"
os.environ["MOCK_MODE"] = "0"
os.environ["OPENAI_API_KEY"] = "sk-test"

import json
from collections import defaultdict
from types import SimpleNamespace

import pytest
from jose import jwt


class FakeQuery:
    def __init__(self, sb, table):
        self.sb = sb
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def select(self, *_):
        return self

    def eq(self, col, val):
        self.filters.append((col, val))
        return self

    def order(self, col, desc=False):
        self.order_by = (col, desc)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def execute(self):
        if (self.table, self.op) in self.sb.fail_on:
            raise RuntimeError(f"{self.table} {self.op} exploded")
        if self.op == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = []
            for r in rows:
                r = dict(r)
                r.setdefault("id", f"{self.table}-{len(self.sb.rows[self.table]) + 1}")
                self.sb.rows[self.table].append(r)
                stored.append(r)
            self.sb.inserts.append(self.table)
            return SimpleNamespace(data=stored)

        rows = [r for r in self.sb.rows[self.table] if all(r.get(c) == v for c, v in self.filters)]
        if self.order_by:
            col, desc = self.order_by
            rows.sort(key=lambda r: r.get(col), reverse=desc)
        if self.max_rows is not None:
            rows = rows[:self.max_rows]
        return SimpleNamespace(data=rows)


class FakeSupabase:
    def __init__(self):
        self.rows = defaultdict(list)
        self.fail_on = set()
        self.inserts = []

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_db(monkeypatch):
    from quizmaker.services import db

    sb = FakeSupabase()
    monkeypatch.setattr(db, "_supabase", sb)
    return sb


class ScriptedLLM:
    """Stands in for services.llm.llm: replays queued replies and records calls."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)
        return self

    async def __call__(self, messages, **kw):
        self.calls.append({"messages": messages, **kw})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_llm(monkeypatch):
    from quizmaker.services import generation

    scripted = ScriptedLLM()
    monkeypatch.setattr(generation, "llm", scripted)
    return scripted


@pytest.fixture
def make_token():
    def _make(sub="user-123", secret="test-secret"):
        return jwt.encode({"sub": sub, "aud": "authenticated"}, secret, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from quizmaker.main import app

    return TestClient(app)


@pytest.fixture
def sample_questions():
    return [
        {"question_type": "mcq", "question": "Capital of France?",
         "options": ["Paris", "Lyon", "Nice", "Lille"], "correct_answer": "Paris"},
        {"question_type": "vsa", "question": "What do mitochondria do?",
         "options": None, "correct_answer": "The mitochondria produces energy"},
        {"question_type": "lsa", "question": "Describe photosynthesis.",
         "options": None, "correct_answer": "Plants convert sunlight water and carbon dioxide into glucose"},
    ]


@pytest.fixture
def questions_json(sample_questions):
    return json.dumps(sample_questions)
