import json, re
from loguru import logger
from pydantic import ValidationError
from ..errors import InvalidQuestionsFormat, UpstreamParseFailure
from ..schemas import GeneratedQuestion

_FENCE_OPEN = re.compile(r"^```(?:json|JSON)?\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")

def _clean(s: str) -> str:
    s = (s or "").strip()
    if s.startswith("```"):
        s = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", s))
    return s.strip()

def parse_questions(s: str) -> list[GeneratedQuestion]:
    cleaned = _clean(s)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error(f"[parse] failed to parse completion: {cleaned}")
        raise UpstreamParseFailure()

    if not isinstance(data, list) or not data:
        logger.error(f"[parse] expected a non-empty JSON array, got: {cleaned[:2000]}")
        raise InvalidQuestionsFormat()

    try:
        return [GeneratedQuestion.model_validate(item) for item in data]
    except ValidationError as e:
        logger.error(f"[parse] question failed validation: {e}")
        raise InvalidQuestionsFormat()
