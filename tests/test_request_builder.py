import pytest
from pydantic import ValidationError

from quizmaker.errors import ValidationFailed
from quizmaker.services.request_builder import SourceKind, build, coerce_count, filter_types

TEXT = "Cells are the basic unit of life. " * 3


@pytest.mark.parametrize("raw,expected", [
    (999, 50),
    (0, 1),
    (-3, 1),
    (12, 12),
    ("20", 20),
    (7.9, 7),
    ("abc", 5),
    (None, 5),
    (float("nan"), 5),
    (float("inf"), 50),
])
def test_coerce_count(raw, expected):
    assert coerce_count(raw) == expected


def test_filter_types_keeps_valid_in_order():
    assert filter_types(["lsa", "MCQ", "essay", "mcq"]) == ("lsa", "mcq")
    assert filter_types("vsa") == ("vsa",)
    assert filter_types(None) == ()
    assert filter_types(42) == ()


def test_empty_types_fail():
    with pytest.raises(ValidationFailed, match="At least one question type"):
        build(5, [], "text", TEXT)
    with pytest.raises(ValidationFailed):
        build(5, ["essay"], "text", TEXT)


def test_topic_bounds():
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "topic", "a")
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "topic", "   a   ")
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "topic", "x" * 201)
    req = build(5, ["mcq"], "topic", "AI")
    assert req.payload == "AI"
    assert build(5, ["mcq"], "topic", "x" * 200).payload == "x" * 200


def test_topic_is_trimmed():
    assert build(5, ["mcq"], SourceKind.TOPIC, "  Photosynthesis  ").payload == "Photosynthesis"


def test_text_bounds():
    with pytest.raises(ValidationFailed, match="at least 50"):
        build(5, ["mcq"], "text", "too short")
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "text", " " * 60 + "short")
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "text", "x" * 50_001)
    assert build(5, ["mcq"], "text", "x" * 50_000).source_kind is SourceKind.TEXT


def test_non_string_payload_fails():
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "topic", None)
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "text", 12345)


def test_unknown_source_kind():
    with pytest.raises(ValidationFailed):
        build(5, ["mcq"], "video", TEXT)


def test_request_is_immutable():
    req = build("999", ["mcq", "vsa"], "text", TEXT)
    assert req.count == 50
    assert req.question_types == ("mcq", "vsa")
    with pytest.raises(ValidationError):
        req.count = 3
