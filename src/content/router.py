"""Content item API endpoints.

Provides routes for:
- Item creation, editing and hard delete
- Public listing with keyword search
- Item detail (counts a view)
"""

from fastapi import APIRouter, Query, status

from src.auth.dependencies import CurrentUser, OptionalUser
from src.config import get_settings
from src.listing.dependencies import ListingServiceDep
from src.listing.schemas import ListingResponse
from src.listing.service import SearchType

from .dependencies import ContentServiceDep
from .models import ItemKind, ItemSpace
from .schemas import CreateItemRequest, ItemDetailResponse, UpdateItemRequest


router = APIRouter(prefix="/v1/{space}/items", tags=["items"])


@router.post(
    "",
    response_model=ItemDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
)
async def create_item(
    space: ItemSpace,
    data: CreateItemRequest,
    content_service: ContentServiceDep,
    listing_service: ListingServiceDep,
    user: CurrentUser,
) -> ItemDetailResponse:
    """Create an item. Only admins may create ``NOTICE`` items."""
    item = await content_service.create(space, user, data.type, data.title, data.body)
    return ItemDetailResponse.from_view(await listing_service.describe(item, user))


@router.get(
    "",
    response_model=ListingResponse,
    summary="List items",
)
async def list_items(
    space: ItemSpace,
    listing_service: ListingServiceDep,
    user: OptionalUser,
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    kind: ItemKind | None = Query(default=None, alias="type"),
    keyword: str | None = Query(default=None, max_length=100),
    search_type: SearchType = Query(default=SearchType.TITLE_CONTENT, alias="searchType"),
) -> ListingResponse:
    """Public listing: notices then regular items, pinned first, newest first."""
    result = await listing_service.list_page(
        space,
        user,
        kind=kind,
        keyword=keyword,
        search_type=search_type,
        page=page,
        size=size or get_settings().listing_default_page_size,
    )
    return ListingResponse.from_page(result)


@router.get(
    "/{item_id}",
    response_model=ItemDetailResponse,
    summary="Get item",
)
async def get_item(
    space: ItemSpace,
    item_id: int,
    listing_service: ListingServiceDep,
    user: OptionalUser,
) -> ItemDetailResponse:
    """Item detail. Hidden items are only shown to admins and their author."""
    view = await listing_service.get_detail(space, item_id, user)
    return ItemDetailResponse.from_view(view)


@router.put(
    "/{item_id}",
    response_model=ItemDetailResponse,
    summary="Update item",
)
async def update_item(
    space: ItemSpace,
    item_id: int,
    data: UpdateItemRequest,
    content_service: ContentServiceDep,
    listing_service: ListingServiceDep,
    user: CurrentUser,
) -> ItemDetailResponse:
    item = await content_service.update(
        space, item_id, user, data.title, data.body, kind=data.type
    )
    return ItemDetailResponse.from_view(await listing_service.describe(item, user))


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete item",
)
async def delete_item(
    space: ItemSpace,
    item_id: int,
    content_service: ContentServiceDep,
    user: CurrentUser,
) -> None:
    """Permanently delete an item with its comments and recommendations."""
    await content_service.hard_delete(space, item_id, user)
