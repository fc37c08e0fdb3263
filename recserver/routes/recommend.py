"""Group recommendation endpoint."""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ..models import ErrorResponse, MovieCard, RecommendRequest, RecommendResponse
from ..state import AppState, get_state

logger = logging.getLogger(__name__)

router = APIRouter()


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "No preferences or malformed body"},
    404: {"model": ErrorResponse, "description": "Catalog is empty; run the populate script"},
    503: {"model": ErrorResponse, "description": "Embedding provider unavailable (retryable)"},
}


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def recommend(request: RecommendRequest, state: AppState = Depends(get_state)):
    """Embed each member's answer, average, and return the closest movies."""
    answers = [
        {"person": a.person if a.person is not None else i, "description": a.description}
        for i, a in enumerate(request.answers)
    ]
    logger.info("[recommend] request with %d answer(s)", len(answers))

    # Store reads are blocking; keep them off the event loop
    catalog = await asyncio.to_thread(state.load_catalog) if answers else []
    result = await state.engine.recommend(answers, catalog)

    cards = [MovieCard(**r.to_response_dict()) for r in result.recommendations]
    return RecommendResponse(
        recommendations=cards,
        total_scored=result.total_scored,
        message=f"Found {result.total_scored} movies, showing top matches",
    )
