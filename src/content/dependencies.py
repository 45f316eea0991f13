"""FastAPI dependencies for content items."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ContentItemService


async def get_content_service(request: Request) -> ContentItemService:
    """Get content item service from app state."""
    app_state = request.app.state
    service = getattr(app_state, "content_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content service unavailable",
        )
    return service


ContentServiceDep = Annotated[ContentItemService, Depends(get_content_service)]
