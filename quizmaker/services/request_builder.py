import math
from enum import Enum
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict

from ..errors import ValidationFailed
from ..schemas import QUESTION_TYPES

DEFAULT_COUNT = 5
MIN_COUNT, MAX_COUNT = 1, 50
MIN_TEXT_CHARS, MAX_TEXT_CHARS = 50, 50_000
MIN_TOPIC_CHARS, MAX_TOPIC_CHARS = 2, 200


class SourceKind(str, Enum):
    TEXT = "text"
    TOPIC = "topic"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_kind: SourceKind
    payload: str
    count: int
    question_types: Tuple[str, ...]


def coerce_count(raw: Any) -> int:
    if isinstance(raw, bool):
        raw = None
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_COUNT
    if math.isnan(value):
        return DEFAULT_COUNT
    value = min(max(value, MIN_COUNT), MAX_COUNT)
    return int(value)


def filter_types(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str):
        raw = [raw]
    elif not isinstance(raw, (list, tuple, set, frozenset)):
        return ()
    out = []
    for t in raw:
        t = str(t).strip().lower()
        if t in QUESTION_TYPES and t not in out:
            out.append(t)
    return tuple(out)


def build(raw_count: Any, raw_types: Any, source_kind: Any, source_payload: Any) -> GenerationRequest:
    try:
        kind = SourceKind(source_kind)
    except ValueError:
        raise ValidationFailed(f"Unknown source kind: {source_kind!r}")

    types = filter_types(raw_types)
    if not types:
        raise ValidationFailed("At least one question type required")

    if not isinstance(source_payload, str):
        source_payload = ""

    if kind is SourceKind.TEXT:
        if len(source_payload.strip()) < MIN_TEXT_CHARS:
            raise ValidationFailed(
                f"Please provide enough text content (at least {MIN_TEXT_CHARS} characters) to generate questions."
            )
        if len(source_payload) > MAX_TEXT_CHARS:
            raise ValidationFailed(f"Text must be under {MAX_TEXT_CHARS:,} characters.")
        payload = source_payload
    else:
        if len(source_payload.strip()) < MIN_TOPIC_CHARS:
            raise ValidationFailed(f"Please provide a valid topic (at least {MIN_TOPIC_CHARS} characters).")
        if len(source_payload) > MAX_TOPIC_CHARS:
            raise ValidationFailed(f"Topic must be under {MAX_TOPIC_CHARS} characters.")
        payload = source_payload.strip()

    return GenerationRequest(
        source_kind=kind,
        payload=payload,
        count=coerce_count(raw_count),
        question_types=types,
    )
