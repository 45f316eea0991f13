"""Recommendation API endpoints."""

from fastapi import APIRouter

from src.auth.dependencies import CurrentUser, OptionalUser
from src.content.models import ItemSpace

from .dependencies import RecommendationServiceDep
from .schemas import RecommendationResponse


router = APIRouter(prefix="/v1/{space}/items", tags=["recommendations"])


@router.post(
    "/{item_id}/recommendations",
    response_model=RecommendationResponse,
    summary="Toggle recommendation",
)
async def toggle_recommendation(
    space: ItemSpace,
    item_id: int,
    service: RecommendationServiceDep,
    user: CurrentUser,
) -> RecommendationResponse:
    """Recommend the item, or withdraw an existing recommendation."""
    result = await service.toggle(space, item_id, user)
    return RecommendationResponse.from_result(result)


@router.get(
    "/{item_id}/recommendations",
    response_model=RecommendationResponse,
    summary="Get recommendation status",
)
async def get_recommendation_status(
    space: ItemSpace,
    item_id: int,
    service: RecommendationServiceDep,
    user: OptionalUser,
) -> RecommendationResponse:
    result = await service.status(space, item_id, user)
    return RecommendationResponse.from_result(result)
