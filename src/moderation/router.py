"""Admin item endpoints.

Provides routes for:
- The admin listing (hidden items and report counts included)
- Manual hide/restore and pin/unpin
"""

from fastapi import APIRouter, Query

from src.auth.dependencies import AdminUser
from src.config import get_settings
from src.content.models import ItemKind, ItemSpace
from src.content.schemas import ItemSummaryResponse
from src.listing.dependencies import ListingServiceDep
from src.listing.schemas import ListingResponse
from src.listing.service import SearchType, StatusFilter

from .dependencies import ModerationServiceDep


router = APIRouter(prefix="/v1/admin/{space}/items", tags=["admin"])


@router.get(
    "",
    response_model=ListingResponse,
    summary="Admin item listing",
)
async def list_items_admin(
    space: ItemSpace,
    listing_service: ListingServiceDep,
    admin: AdminUser,
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    kind: ItemKind | None = Query(default=None, alias="type"),
    keyword: str | None = Query(default=None, max_length=100),
    search_type: SearchType = Query(default=SearchType.TITLE_CONTENT, alias="searchType"),
    status_filter: StatusFilter = Query(default=StatusFilter.ALL, alias="status"),
) -> ListingResponse:
    """Admin listing; notices and regular items are paginated independently."""
    result = await listing_service.list_page(
        space,
        admin,
        kind=kind,
        keyword=keyword,
        search_type=search_type,
        page=page,
        size=size or get_settings().listing_default_page_size,
        admin_view=True,
        status_filter=status_filter,
    )
    return ListingResponse.from_page(result)


@router.patch("/{item_id}/hide", response_model=ItemSummaryResponse, summary="Hide item")
async def hide_item(
    space: ItemSpace,
    item_id: int,
    moderation: ModerationServiceDep,
    listing_service: ListingServiceDep,
    admin: AdminUser,
) -> ItemSummaryResponse:
    item = await moderation.manual_hide(space, item_id, admin)
    return ItemSummaryResponse.from_view(await listing_service.describe(item, admin))


@router.patch(
    "/{item_id}/restore", response_model=ItemSummaryResponse, summary="Restore item"
)
async def restore_item(
    space: ItemSpace,
    item_id: int,
    moderation: ModerationServiceDep,
    listing_service: ListingServiceDep,
    admin: AdminUser,
) -> ItemSummaryResponse:
    item = await moderation.manual_restore(space, item_id, admin)
    return ItemSummaryResponse.from_view(await listing_service.describe(item, admin))


@router.patch("/{item_id}/pin", response_model=ItemSummaryResponse, summary="Pin item")
async def pin_item(
    space: ItemSpace,
    item_id: int,
    moderation: ModerationServiceDep,
    listing_service: ListingServiceDep,
    admin: AdminUser,
) -> ItemSummaryResponse:
    item = await moderation.pin(space, item_id, admin)
    return ItemSummaryResponse.from_view(await listing_service.describe(item, admin))


@router.patch("/{item_id}/unpin", response_model=ItemSummaryResponse, summary="Unpin item")
async def unpin_item(
    space: ItemSpace,
    item_id: int,
    moderation: ModerationServiceDep,
    listing_service: ListingServiceDep,
    admin: AdminUser,
) -> ItemSummaryResponse:
    item = await moderation.unpin(space, item_id, admin)
    return ItemSummaryResponse.from_view(await listing_service.describe(item, admin))
