from fastapi import APIRouter, Depends
from loguru import logger
from starlette.responses import Response

from ..auth import require_user
from ..errors import QuizError
from ..schemas import GenerateFromTextBody, GenerateFromTopicBody, QuestionsResponse
from ..services.generation import run_generation
from ..services.request_builder import GenerationRequest, SourceKind, build

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


async def _generate(request: GenerationRequest, user_id: str) -> dict:
    logger.info(
        f"[generate] user_id={user_id} source={request.source_kind.value} "
        f"count={request.count} types={','.join(request.question_types)}"
    )
    try:
        questions = await run_generation(request)
    except QuizError as e:
        logger.warning(f"[generate] {e.code}: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"[generate] unexpected error: {e}")
        raise QuizError("Unexpected server error")
    logger.info(f"[generate] returning {len(questions)} questions to user_id={user_id}")
    return {"questions": [q.model_dump() for q in questions]}


@router.options("/generate-questions")
@router.options("/generate-from-topic")
def preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/generate-questions", response_model=QuestionsResponse)
async def generate_from_text(body: GenerateFromTextBody, user_id: str = Depends(require_user)):
    request = build(body.questionCount, body.questionTypes, SourceKind.TEXT, body.text)
    return await _generate(request, user_id)


@router.post("/generate-from-topic", response_model=QuestionsResponse)
async def generate_from_topic(body: GenerateFromTopicBody, user_id: str = Depends(require_user)):
    request = build(body.questionCount, body.questionTypes, SourceKind.TOPIC, body.topic)
    return await _generate(request, user_id)
