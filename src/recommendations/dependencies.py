"""FastAPI dependencies for recommendations."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import RecommendationService


async def get_recommendation_service(request: Request) -> RecommendationService:
    """Get recommendation service from app state."""
    app_state = request.app.state
    service = getattr(app_state, "recommendation_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Recommendation service unavailable",
        )
    return service


RecommendationServiceDep = Annotated[
    RecommendationService, Depends(get_recommendation_service)
]
