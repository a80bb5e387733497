import asyncio, json
from openai import OpenAI
from ..settings import settings

_client: OpenAI | None = None

MOCK_RESEARCH = (
    "The Internet moves data between networks using layered protocols. "
    "The network layer routes packets between hosts using IP addresses, while the "
    "transport layer provides end-to-end delivery. TCP establishes a connection with a "
    "three-way handshake before any data is exchanged."
)

MOCK_QUESTIONS = [
    {"question_type": "mcq", "question": "Which layer handles routing on the Internet?",
     "options": ["Physical", "Data Link", "Network", "Transport"], "correct_answer": "Network"},
    {"question_type": "vsa", "question": "What does TCP do before exchanging data?",
     "options": None, "correct_answer": "It performs a three-way handshake to establish a connection."},
    {"question_type": "lsa", "question": "Explain how the network and transport layers divide responsibilities.",
     "options": None,
     "correct_answer": "The network layer routes packets between hosts using IP addresses. "
                       "The transport layer provides end-to-end delivery between applications."},
]


def client() -> OpenAI:
    global _client
    if _client is None:
        # No retries: a failed call surfaces straight to the user.
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _client


def _mock_reply(messages) -> str:
    sys = (messages[0].get("content", "") if messages else "").lower()
    if "json array" in sys:
        return "```json\n" + json.dumps(MOCK_QUESTIONS) + "\n```"
    return MOCK_RESEARCH


def _llm_sync(messages, *, max_tokens=None, temperature=0.2):
    if settings.MOCK_MODE:
        return _mock_reply(messages)
    extra = {"max_tokens": max_tokens} if max_tokens else {}
    resp = client().chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=messages,
        temperature=temperature,
        **extra,
    )
    return resp.choices[0].message.content if resp.choices else None

async def llm(messages, **kw):
    return await asyncio.to_thread(_llm_sync, messages, **kw)
