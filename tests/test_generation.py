import asyncio
import json

import httpx
import openai
import pytest

from quizmaker.errors import (
    GenerationFailed, InvalidQuestionsFormat, QuotaExhausted, RateLimited, UpstreamParseFailure,
)
from quizmaker.services import generation
from quizmaker.services.prompts import distribute
from quizmaker.services.request_builder import build

TEXT = "The mitochondria produces energy for the cell through respiration. " * 3
URL = "https://llm.test/v1/chat/completions"


def status_error(cls, status):
    response = httpx.Response(status, request=httpx.Request("POST", URL))
    return cls(f"upstream said {status}", response=response, body=None)


def run(coro):
    return asyncio.run(coro)


def test_distribute_is_even():
    assert distribute(5, ["mcq", "vsa", "lsa"]) == {"mcq": 2, "vsa": 2, "lsa": 1}
    assert distribute(6, ["mcq", "lsa"]) == {"mcq": 3, "lsa": 3}
    assert distribute(1, ["mcq", "vsa"]) == {"mcq": 1, "vsa": 0}


def test_text_mode_skips_research(fake_llm, questions_json):
    fake_llm.queue(questions_json)
    req = build(3, ["mcq", "vsa", "lsa"], "text", TEXT)
    questions = run(generation.run_generation(req))

    assert len(questions) == 3
    assert len(fake_llm.calls) == 1
    call = fake_llm.calls[0]
    system, user = call["messages"]
    assert "exactly 3 practice test questions" in system["content"]
    assert "exactly 4 options" in system["content"]
    assert "1-3 sentences" in system["content"] and "3-6 sentences" in system["content"]
    assert "1 mcq, 1 vsa, 1 lsa" in system["content"]
    assert user["content"].endswith(TEXT)
    assert call["temperature"] == 0.7


def test_topic_mode_researches_then_generates(fake_llm, questions_json):
    overview = "Photosynthesis " * 2000
    fake_llm.queue(overview, questions_json)
    req = build(3, ["mcq", "vsa", "lsa"], "topic", "  Photosynthesis ")
    questions = run(generation.run_generation(req))

    assert len(questions) == 3
    research, generate = fake_llm.calls
    assert "Topic: Photosynthesis" in research["messages"][0]["content"]
    assert "2000-3000 words" in research["messages"][0]["content"]
    assert research["temperature"] == 0.5
    assert 'research content about "Photosynthesis"' in generate["messages"][0]["content"]
    grounding = generate["messages"][1]["content"].split("\n\n", 1)[1]
    assert len(grounding) == generation.MAX_GROUNDING_CHARS


def test_stages_run_independently(fake_llm, questions_json):
    fake_llm.queue("An overview of volcanoes.")
    artifact = run(generation.research_topic("Volcanoes"))
    assert artifact.overview == "An overview of volcanoes."

    fake_llm.queue(questions_json)
    req = build(3, ["mcq"], "topic", "Volcanoes")
    questions = run(generation.generate_questions(req, artifact.overview))
    assert len(questions) == 3
    assert len(fake_llm.calls) == 2


def test_extra_questions_are_truncated(fake_llm, questions_json):
    fake_llm.queue(questions_json)
    req = build(2, ["mcq"], "text", TEXT)
    assert len(run(generation.run_generation(req))) == 2


@pytest.mark.parametrize("exc,expected", [
    (status_error(openai.RateLimitError, 429), RateLimited),
    (status_error(openai.APIStatusError, 402), QuotaExhausted),
    (status_error(openai.InternalServerError, 500), GenerationFailed),
    (openai.APITimeoutError(request=httpx.Request("POST", URL)), GenerationFailed),
    (openai.APIConnectionError(request=httpx.Request("POST", URL)), GenerationFailed),
])
def test_upstream_errors_are_mapped(fake_llm, exc, expected):
    fake_llm.queue(exc)
    req = build(3, ["mcq"], "text", TEXT)
    with pytest.raises(expected):
        run(generation.run_generation(req))


def test_research_failure_message(fake_llm):
    fake_llm.queue(status_error(openai.InternalServerError, 503))
    req = build(3, ["mcq"], "topic", "Volcanoes")
    with pytest.raises(GenerationFailed, match="Failed to research topic"):
        run(generation.run_generation(req))
    assert len(fake_llm.calls) == 1


def test_quota_during_second_stage(fake_llm):
    fake_llm.queue("overview", status_error(openai.APIStatusError, 402))
    req = build(3, ["mcq"], "topic", "Volcanoes")
    with pytest.raises(QuotaExhausted):
        run(generation.run_generation(req))


def test_empty_completion(fake_llm):
    fake_llm.queue("   ")
    req = build(3, ["mcq"], "text", TEXT)
    with pytest.raises(GenerationFailed, match="No content"):
        run(generation.run_generation(req))


def test_bad_payloads(fake_llm):
    req = build(3, ["mcq"], "text", TEXT)
    fake_llm.queue("not json at all")
    with pytest.raises(UpstreamParseFailure):
        run(generation.run_generation(req))
    fake_llm.queue(json.dumps([]))
    with pytest.raises(InvalidQuestionsFormat):
        run(generation.run_generation(req))
