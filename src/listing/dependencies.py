"""FastAPI dependencies for listings."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ListingService


async def get_listing_service(request: Request) -> ListingService:
    """Get listing service from app state."""
    app_state = request.app.state
    service = getattr(app_state, "listing_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Listing service unavailable",
        )
    return service


ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
