"""Listing and pagination aggregator.

Builds public and admin item listings: notice/regular buckets, pinned items
first, keyword search, and the derived per-item statistics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from src.auth.permissions import Principal, can_modify
from src.content.models import ContentItem, ItemKind, ItemSpace
from src.core.errors import AuthenticationRequiredError, PermissionDeniedError, ValidationError
from src.core.schemas import page_count
from src.reports.models import ReportTargetType


if TYPE_CHECKING:
    from src.comments.service import CommentService
    from src.content.service import ContentItemService
    from src.recommendations.service import RecommendationService
    from src.reports.service import ReportService


logger = structlog.get_logger(__name__)


class SearchType(str, Enum):
    """Fields a keyword is matched against."""

    TITLE = "TITLE"
    CONTENT = "CONTENT"
    AUTHOR = "AUTHOR"
    COMMENT = "COMMENT"
    TITLE_CONTENT = "TITLE_CONTENT"


class StatusFilter(str, Enum):
    """Admin listing filter."""

    ALL = "ALL"
    NOTICE = "NOTICE"
    REVIEW = "REVIEW"
    HIDDEN = "HIDDEN"
    REPORTED = "REPORTED"


@dataclass
class ItemView:
    """An item with its derived statistics for one caller."""

    item: ContentItem
    view_count: int = 0
    recommend_count: int = 0
    comment_count: int = 0
    report_count: int = 0
    total_report_count: int = 0
    recommended: bool = False
    can_edit: bool = False


@dataclass
class ListingPage:
    """One page of a listing (pages are 0-based)."""

    page: int
    size: int
    total_elements: int
    total_pages: int
    notices: list[ItemView] = field(default_factory=list)
    contents: list[ItemView] = field(default_factory=list)

    @property
    def last(self) -> bool:
        return self.page >= self.total_pages - 1


def listing_order(item: ContentItem) -> tuple[bool, int]:
    """Sort key: pinned first, then newest id."""
    return (not item.pinned, -item.item_id)


class ListingService:
    """Read-side aggregation over items, comments, recommendations and reports."""

    def __init__(
        self,
        content_service: "ContentItemService",
        comment_service: "CommentService",
        recommendation_service: "RecommendationService",
        report_service: "ReportService",
        max_page_size: int = 100,
    ):
        self.content_service = content_service
        self.comment_service = comment_service
        self.recommendation_service = recommendation_service
        self.report_service = report_service
        self.max_page_size = max_page_size

    # ==========================================================================
    # Item statistics
    # ==========================================================================

    async def describe(self, item: ContentItem, principal: Principal | None) -> ItemView:
        """Derive counts and caller flags for an item."""
        space = item.space
        total_reports, outstanding = await self.report_service.count_for_target(
            space, ReportTargetType.CONTENT, item.item_id
        )
        return ItemView(
            item=item,
            view_count=await self.content_service.view_count(space, item.item_id),
            recommend_count=await self.recommendation_service.count(space, item.item_id),
            comment_count=await self.comment_service.count_visible(space, item.item_id),
            report_count=outstanding,
            total_report_count=total_reports,
            recommended=await self.recommendation_service.is_recommended(
                space, item.item_id, principal.user_id if principal else None
            ),
            can_edit=can_modify(principal, item),
        )

    async def get_detail(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ItemView:
        """Detail view of a visible item. Counts the read as a view."""
        item = await self.content_service.get_visible(space, item_id, principal)
        await self.content_service.increment_view(space, item_id)
        return await self.describe(item, principal)

    # ==========================================================================
    # Filtering
    # ==========================================================================

    async def _matches(
        self, item: ContentItem, keyword: str, search_type: SearchType
    ) -> bool:
        needle = keyword.casefold()
        if search_type == SearchType.TITLE:
            return needle in item.title.casefold()
        if search_type == SearchType.CONTENT:
            return needle in self.content_service.plain_text(item).casefold()
        if search_type == SearchType.AUTHOR:
            return needle in item.author_nickname.casefold()
        if search_type == SearchType.COMMENT:
            return await self.comment_service.any_visible_matches(
                item.space, item.item_id, keyword
            )
        return (
            needle in item.title.casefold()
            or needle in self.content_service.plain_text(item).casefold()
        )

    async def _filtered(
        self,
        items: list[ContentItem],
        kind: ItemKind | None,
        keyword: str | None,
        search_type: SearchType,
        status_filter: StatusFilter,
    ) -> list[ContentItem]:
        if kind is not None:
            items = [item for item in items if item.kind == kind]

        if status_filter == StatusFilter.NOTICE:
            items = [item for item in items if item.kind == ItemKind.NOTICE]
        elif status_filter == StatusFilter.REVIEW:
            items = [item for item in items if item.kind == ItemKind.REVIEW]
        elif status_filter == StatusFilter.HIDDEN:
            items = [item for item in items if item.hidden]
        elif status_filter == StatusFilter.REPORTED:
            reported = []
            for item in items:
                _, outstanding = await self.report_service.count_for_target(
                    item.space, ReportTargetType.CONTENT, item.item_id
                )
                if outstanding > 0:
                    reported.append(item)
            items = reported

        keyword = (keyword or "").strip()
        if keyword:
            items = [
                item for item in items if await self._matches(item, keyword, search_type)
            ]
        return items

    # ==========================================================================
    # Pages
    # ==========================================================================

    async def list_page(
        self,
        space: ItemSpace,
        principal: Principal | None,
        kind: ItemKind | None = None,
        keyword: str | None = None,
        search_type: SearchType = SearchType.TITLE_CONTENT,
        page: int = 0,
        size: int = 10,
        admin_view: bool = False,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> ListingPage:
        """One page of the public or admin listing of a space.

        Public pages merge notices and regular items into one sequence and
        exclude hidden items for non-admin callers. Admin pages include
        hidden items and paginate each bucket independently.

        Raises:
            ValidationError: If ``page`` is negative or ``size`` is out of range
            PermissionDeniedError: For an admin view by a non-admin
        """
        if page < 0:
            raise ValidationError("Page must be >= 0")
        if size < 1 or size > self.max_page_size:
            raise ValidationError(f"Size must be between 1 and {self.max_page_size}")

        if admin_view:
            if principal is None:
                raise AuthenticationRequiredError
            if not principal.is_admin:
                raise PermissionDeniedError("Admin role required")
        else:
            status_filter = StatusFilter.ALL

        items = await self.content_service.list_space(space)
        if not (principal and principal.is_admin):
            items = [item for item in items if not item.hidden]

        items = await self._filtered(items, kind, keyword, search_type, status_filter)

        notices = sorted(
            (item for item in items if item.kind == ItemKind.NOTICE), key=listing_order
        )
        contents = sorted(
            (item for item in items if item.kind == ItemKind.REVIEW), key=listing_order
        )

        start, end = page * size, (page + 1) * size
        if admin_view:
            notice_slice, content_slice = notices[start:end], contents[start:end]
            total_pages = max(page_count(len(notices), size), page_count(len(contents), size))
        else:
            merged = (notices + contents)[start:end]
            notice_slice = [item for item in merged if item.kind == ItemKind.NOTICE]
            content_slice = [item for item in merged if item.kind == ItemKind.REVIEW]
            total_pages = page_count(len(notices) + len(contents), size)

        result = ListingPage(
            page=page,
            size=size,
            total_elements=len(notices) + len(contents),
            total_pages=total_pages,
            notices=[await self.describe(item, principal) for item in notice_slice],
            contents=[await self.describe(item, principal) for item in content_slice],
        )

        logger.debug(
            "listing_page_built",
            space=space.value,
            admin_view=admin_view,
            page=page,
            total_elements=result.total_elements,
        )
        return result
