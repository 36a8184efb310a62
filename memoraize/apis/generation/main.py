from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from memoraize.core.logging import get_logger
from memoraize.modules.generation import generator
from memoraize.modules.generation.models import (
    GenerateRequest,
    GenerateResponse,
    RecommendationResponse,
)


router = APIRouter()

logger = get_logger(__name__)


@router.post(
    "/api/generate",
    response_model=GenerateResponse,
    response_model_exclude_none=True,
    tags=["generation"],
)
async def generate(req: GenerateRequest):
    try:
        cards = await generator.generate_flashcards(req)
    except Exception as e:
        logger.error(f"Error generating flashcards: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to generate flashcards"},
        )
    return GenerateResponse(flashcards=cards)


@router.get(
    "/api/generate",
    response_model=RecommendationResponse,
    response_model_by_alias=True,
    tags=["generation"],
)
async def recommend(
    topics: str = Query(default="", description="Comma-separated existing topics"),
):
    try:
        topic = await generator.recommend_topic(topics)
    except Exception as e:
        logger.error(f"Error recommending topic: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to recommend a topic"},
        )
    return RecommendationResponse(recommended_topic=topic)
