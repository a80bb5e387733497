import math
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..errors import InvalidInput
from ..schemas import AnalyticsSummary, QuizQuestion, ReviewRecord, TestResult

RECENT_LIMIT = 10

SCORE_MESSAGES = [
    (90, "Outstanding!"),
    (80, "Great job!"),
    (60, "Good effort!"),
    (40, "Keep practicing!"),
]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def aggregate(questions: Sequence[QuizQuestion], topic: str = "Untitled",
              created_at: Optional[datetime] = None) -> TestResult:
    """Score a completed quiz.

    Every question must already carry ``is_correct``. The input is not
    modified and the same arguments always give the same result.
    """
    if not questions:
        raise InvalidInput("Cannot score a quiz with no questions.")
    if any(q.is_correct is None for q in questions):
        raise InvalidInput("Every question must be graded before scoring.")

    total = len(questions)
    correct = sum(1 for q in questions if q.is_correct)
    return TestResult(
        topic=topic,
        total_questions=total,
        correct_answers=correct,
        score=round_half_up(100 * correct / total),
        question_types=sorted({q.question_type for q in questions}),
        created_at=created_at,
    )


def review_records(questions: Iterable[QuizQuestion]) -> List[ReviewRecord]:
    return [
        ReviewRecord(
            question_number=q.question_number,
            question_type=q.question_type,
            question=q.question,
            options=q.options,
            correct_answer=q.correct_answer,
            user_answer=q.user_answer,
            is_correct=bool(q.is_correct),
        )
        for q in sorted(questions, key=lambda q: q.question_number)
    ]


def score_message(score: int) -> str:
    for floor, message in SCORE_MESSAGES:
        if score >= floor:
            return message
    return "Review the material"


def summarize_history(rows: Sequence[Mapping[str, Any]]) -> AnalyticsSummary:
    """Roll up stored result rows (any order) into dashboard totals."""
    rows = sorted(rows, key=lambda r: str(r.get("created_at") or ""))
    if not rows:
        return AnalyticsSummary(tests_taken=0, average_score=0, total_questions=0,
                                total_correct=0, total_incorrect=0)

    scores = [float(r.get("score") or 0) for r in rows]
    total_questions = sum(int(r.get("total_questions") or 0) for r in rows)
    total_correct = sum(int(r.get("correct_answers") or 0) for r in rows)
    return AnalyticsSummary(
        tests_taken=len(rows),
        average_score=round_half_up(sum(scores) / len(scores)),
        total_questions=total_questions,
        total_correct=total_correct,
        total_incorrect=total_questions - total_correct,
        best_score=round_half_up(max(scores)),
        recent=[
            {"created_at": r.get("created_at"), "topic": r.get("topic"), "score": r.get("score")}
            for r in rows[-RECENT_LIMIT:]
        ],
    )
