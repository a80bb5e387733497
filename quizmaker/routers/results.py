from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import ValidationError

from ..auth import require_user
from ..errors import InvalidInput, PersistenceFailure, QuizError
from ..schemas import AnalyticsSummary, GeneratedQuestion, QuizQuestion, SubmitQuizBody, SubmitQuizResponse
from ..services import db
from ..services.results import aggregate, review_records, score_message, summarize_history
from ..services.session import play_through

router = APIRouter()

def _as_uuid(val: str) -> str:
    try:
        return str(uuid.UUID(str(val)))
    except ValueError:
        raise InvalidInput("Invalid UUID")

@router.post("/quiz/submit", response_model=SubmitQuizResponse)
def submit_quiz(body: SubmitQuizBody, user_id: str = Depends(require_user)):
    completed = play_through(body.questions, body.answers)
    result = aggregate(completed, topic=body.topic.strip() or "Untitled",
                       created_at=datetime.now(timezone.utc))
    logger.info(f"[submit] user_id={user_id} score={result.score} "
                f"correct={result.correct_answers}/{result.total_questions}")

    # Saving is best effort: the score goes back to the caller either way.
    result_id, save_error = None, None
    try:
        result_id = db.save_test_result(user_id=user_id, result=result, questions=completed)
    except PersistenceFailure as e:
        logger.warning(f"[submit] result not saved for user_id={user_id}: {e.message}")
        save_error = e.message

    return SubmitQuizResponse(
        result=result,
        message=score_message(result.score),
        review=review_records(completed),
        saved=result_id is not None,
        result_id=result_id,
        save_error=save_error,
    )

@router.get("/results")
def history(user_id: str = Depends(require_user)):
    return {"results": db.list_test_results(user_id=user_id)}

@router.get("/results/{result_id}/questions")
def result_questions(result_id: str, user_id: str = Depends(require_user)):
    rows = db.list_test_questions(user_id=user_id, result_id=_as_uuid(result_id))
    return {"questions": rows}

@router.get("/analytics", response_model=AnalyticsSummary)
def analytics(user_id: str = Depends(require_user)):
    return summarize_history(db.list_test_results(user_id=user_id, newest_first=False))

@router.get("/shared/{share_code}")
def shared_test(share_code: str, user_id: str = Depends(require_user)):
    row = db.get_shared_test(share_code)
    try:
        questions = [
            QuizQuestion(**GeneratedQuestion.model_validate(q).model_dump(), question_number=i)
            for i, q in enumerate(row.get("questions") or [], start=1)
        ]
    except (TypeError, ValidationError) as e:
        logger.error(f"[shared] share_code={share_code} has malformed questions: {e}")
        raise QuizError("This shared test could not be loaded.")
    logger.info(f"[shared] user_id={user_id} opened share_code={share_code}")
    return {
        "topic": row.get("topic"),
        "question_count": row.get("question_count") or len(questions),
        "questions": [q.model_dump() for q in questions],
    }
