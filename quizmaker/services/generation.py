"""Question generation against the upstream completion API.

Topic requests run in two stages: ``research_topic`` produces an overview
that becomes the grounding material, then ``generate_questions`` turns
grounding material into questions. Text requests skip the first stage. Each
stage can be called on its own, so a failed generation can be retried with
an already fetched ``ResearchArtifact``.
"""
from loguru import logger
from openai import APIConnectionError, APIError, APIStatusError, APITimeoutError, RateLimitError
from pydantic import BaseModel, ConfigDict

from ..errors import GenerationFailed, QuotaExhausted, RateLimited
from ..schemas import GeneratedQuestion
from ..settings import settings
from .llm import llm
from .parse import parse_questions
from .prompts import question_messages, research_messages
from .request_builder import GenerationRequest, SourceKind

MAX_GROUNDING_CHARS = 15_000


class ResearchArtifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    topic: str
    overview: str


async def _complete(messages, *, stage: str, failure: str, **kw) -> str:
    try:
        content = await llm(messages, **kw)
    except RateLimitError:
        raise RateLimited()
    except APITimeoutError:
        logger.warning(f"[{stage}] upstream timed out after {settings.LLM_TIMEOUT_SECONDS}s")
        raise GenerationFailed(failure)
    except APIStatusError as e:
        if e.status_code == 429:
            raise RateLimited()
        if e.status_code == 402:
            raise QuotaExhausted()
        logger.error(f"[{stage}] upstream error: {e.status_code} {getattr(e, 'message', e)}")
        raise GenerationFailed(failure)
    except (APIConnectionError, APIError) as e:
        logger.error(f"[{stage}] upstream call failed: {e}")
        raise GenerationFailed(failure)

    if not content or not content.strip():
        raise GenerationFailed("No content returned from AI")
    return content


async def research_topic(topic: str) -> ResearchArtifact:
    overview = await _complete(
        research_messages(topic),
        stage="research",
        failure="Failed to research topic",
        temperature=settings.RESEARCH_TEMPERATURE,
    )
    logger.info(f"[research] topic={topic!r} overview_chars={len(overview)}")
    return ResearchArtifact(topic=topic, overview=overview)


async def generate_questions(request: GenerationRequest, grounding: str) -> list[GeneratedQuestion]:
    topic = request.payload if request.source_kind is SourceKind.TOPIC else None
    raw = await _complete(
        question_messages(request.count, request.question_types, grounding[:MAX_GROUNDING_CHARS], topic),
        stage="generate",
        failure="Failed to generate questions. Please try again.",
        temperature=settings.GENERATION_TEMPERATURE,
    )
    questions = parse_questions(raw)
    if len(questions) != request.count:
        logger.warning(f"[generate] asked for {request.count} questions, got {len(questions)}")
    return questions[:request.count]


async def run_generation(request: GenerationRequest) -> list[GeneratedQuestion]:
    if request.source_kind is SourceKind.TOPIC:
        research = await research_topic(request.payload)
        grounding = research.overview
    else:
        grounding = request.payload
    return await generate_questions(request, grounding)
