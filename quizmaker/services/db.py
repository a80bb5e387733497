from typing import Any, Callable, Dict, List, Sequence
from loguru import logger
from supabase import create_client, Client
from ..errors import NotFound, PersistenceFailure
from ..schemas import QuizQuestion, TestResult
from ..settings import settings

_supabase: Client | None = None

def supabase() -> Client:
    global _supabase
    if _supabase is None:
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase

def save_test_result(*, user_id: str, result: TestResult, questions: Sequence[QuizQuestion]) -> str:
    """Insert the result row, then its question rows. Returns the result id.

    The question rows need the parent id, so the parent goes first. If the
    children fail the parent stays in place and the failure is reported.
    """
    row: Dict[str, Any] = {
        "user_id": user_id,
        "topic": result.topic,
        "total_questions": result.total_questions,
        "correct_answers": result.correct_answers,
        "score": result.score,
        "question_types": list(result.question_types),
    }
    if result.created_at:
        row["created_at"] = result.created_at.isoformat()
    try:
        sb = supabase()
        resp = sb.table("test_results").insert(row).execute()
        result_id = resp.data[0]["id"]
    except Exception as e:
        logger.warning(f"[db] test_results insert failed: {e}")
        raise PersistenceFailure("Could not save your test result.") from e

    children = [{
        "test_result_id": result_id,
        "user_id": user_id,
        "question_type": q.question_type,
        "question": q.question,
        "options": q.options,
        "correct_answer": q.correct_answer,
        "user_answer": q.user_answer or None,
        "is_correct": bool(q.is_correct),
        "question_number": q.question_number,
    } for q in questions]
    try:
        sb.table("test_questions").insert(children).execute()
    except Exception as e:
        logger.warning(f"[db] test_questions insert failed for result {result_id}: {e}")
        raise PersistenceFailure(f"Saved test result {result_id} but not its questions.") from e
    return result_id

def _fetch(build_query: Callable[[Client], Any], what: str) -> List[Dict[str, Any]]:
    try:
        return build_query(supabase()).execute().data or []
    except Exception as e:
        logger.warning(f"[db] {what} read failed: {e}")
        raise PersistenceFailure(f"Could not load {what}.") from e

def list_test_results(*, user_id: str, newest_first: bool = True) -> List[Dict[str, Any]]:
    return _fetch(
        lambda sb: sb.table("test_results").select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=newest_first),
        "test history",
    )

def list_test_questions(*, user_id: str, result_id: str) -> List[Dict[str, Any]]:
    return _fetch(
        lambda sb: sb.table("test_questions").select("*")
        .eq("test_result_id", result_id)
        .eq("user_id", user_id)
        .order("question_number"),
        "test questions",
    )

def get_shared_test(share_code: str) -> Dict[str, Any]:
    rows = _fetch(
        lambda sb: sb.table("shared_tests").select("*").eq("share_code", share_code).limit(1),
        "shared test",
    )
    if not rows:
        raise NotFound("This shared test link is invalid or has been removed.")
    return rows[0]
