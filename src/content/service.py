"""Content item service layer.

Business logic for:
- Item creation and editing with title/body validation
- Author-or-admin hard delete with cascade to dependent rows
- Admin-only visibility (hide) and pinning flags
- Best-effort view counting
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from src.auth.permissions import Principal, can_modify
from src.core.errors import (
    AuthenticationRequiredError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

from .models import ContentItem, ItemKind, ItemSpace, create_content_item
from .richtext import HtmlContentInspector, RichContentInspector


if TYPE_CHECKING:
    from src.core.database.sequences import IdAllocator

    from .repository import ContentItemRepository


logger = structlog.get_logger(__name__)


MIN_TITLE_LENGTH = 2
MAX_TITLE_LENGTH = 200

PurgeHook = Callable[[ItemSpace, int], Awaitable[None]]


def item_sequence(space: ItemSpace) -> str:
    """Id sequence name for items of a space."""
    return f"{space.value}_items"


class ContentItemService:
    """Service for board and blog items."""

    def __init__(
        self,
        repository: "ContentItemRepository",
        ids: "IdAllocator",
        inspector: RichContentInspector | None = None,
    ):
        self.repository = repository
        self.ids = ids
        self.inspector = inspector or HtmlContentInspector()
        self._purge_hooks: list[PurgeHook] = []

    def register_purge_hook(self, hook: PurgeHook) -> None:
        """Run ``hook(space, item_id)`` when an item is hard deleted."""
        self._purge_hooks.append(hook)

    # ==========================================================================
    # Validation
    # ==========================================================================

    def _validated_title(self, title: str | None) -> str:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if len(title) < MIN_TITLE_LENGTH:
            raise ValidationError(
                f"Title must be at least {MIN_TITLE_LENGTH} characters"
            )
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Title must be at most {MAX_TITLE_LENGTH} characters"
            )
        return title

    def _validated_body(self, body: str | None) -> tuple[str, bool]:
        """Return the body and whether it embeds media."""
        body = body or ""
        has_media = self.inspector.has_media(body)
        if not self.inspector.plain_text(body) and not has_media:
            raise ValidationError("Content is required")
        return body, has_media

    @staticmethod
    def _check_kind(principal: Principal, kind: ItemKind) -> None:
        if kind == ItemKind.NOTICE and not principal.is_admin:
            raise PermissionDeniedError("Only admins can post notices")

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def find(self, space: ItemSpace, item_id: int) -> ContentItem | None:
        return await self.repository.get(space, item_id)

    async def get(self, space: ItemSpace, item_id: int) -> ContentItem:
        """Get an item regardless of visibility.

        Raises:
            NotFoundError: If the id is unknown or hard deleted
        """
        item = await self.repository.get(space, item_id)
        if item is None:
            raise NotFoundError("Item not found")
        return item

    async def get_visible(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ContentItem:
        """Get an item the caller may see.

        Hidden items are visible to admins and to their author only.
        """
        item = await self.get(space, item_id)
        if item.hidden and not can_modify(principal, item):
            raise NotFoundError("Item not found")
        return item

    async def list_space(self, space: ItemSpace) -> list[ContentItem]:
        return await self.repository.list_space(space)

    async def view_count(self, space: ItemSpace, item_id: int) -> int:
        return await self.repository.get_view_count(space, item_id)

    def plain_text(self, item: ContentItem) -> str:
        return self.inspector.plain_text(item.body)

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def create(
        self,
        space: ItemSpace,
        principal: Principal | None,
        kind: ItemKind,
        title: str,
        body: str,
    ) -> ContentItem:
        """Create a new item authored by the caller."""
        if principal is None:
            raise AuthenticationRequiredError

        clean_title = self._validated_title(title)
        clean_body, has_media = self._validated_body(body)
        self._check_kind(principal, kind)

        item = create_content_item(
            item_id=await self.ids.next_id(item_sequence(space)),
            space=space,
            kind=kind,
            title=clean_title,
            body=clean_body,
            author_id=principal.user_id,
            author_nickname=principal.nickname,
            has_media=has_media,
        )
        await self.repository.insert(item)

        logger.info(
            "content_item_created",
            space=space.value,
            item_id=item.item_id,
            kind=kind.value,
            author_id=principal.user_id,
        )
        return item

    async def update(
        self,
        space: ItemSpace,
        item_id: int,
        principal: Principal | None,
        title: str,
        body: str,
        kind: ItemKind | None = None,
    ) -> ContentItem:
        """Edit title/body (and optionally kind) as author or admin."""
        if principal is None:
            raise AuthenticationRequiredError

        item = await self.get(space, item_id)
        if not can_modify(principal, item):
            raise PermissionDeniedError("Only the author or an admin can edit this item")

        clean_title = self._validated_title(title)
        clean_body, has_media = self._validated_body(body)
        new_kind = kind or item.kind
        if new_kind != item.kind:
            self._check_kind(principal, new_kind)

        item.kind = new_kind
        item.title = clean_title
        item.body = clean_body
        item.has_media = has_media
        item.updated_at = datetime.now(UTC)

        if not await self.repository.update_content(item):
            raise NotFoundError("Item not found")

        logger.info(
            "content_item_updated",
            space=space.value,
            item_id=item_id,
            actor_id=principal.user_id,
        )
        return item

    async def hard_delete(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> None:
        """Irreversibly delete an item and its dependent rows."""
        if principal is None:
            raise AuthenticationRequiredError

        item = await self.get(space, item_id)
        if not can_modify(principal, item):
            raise PermissionDeniedError(
                "Only the author or an admin can delete this item"
            )

        # Item row outlives any failed hook
        for hook in self._purge_hooks:
            await hook(space, item_id)
        await self.repository.delete(space, item_id)

        logger.info(
            "content_item_deleted",
            space=space.value,
            item_id=item_id,
            actor_id=principal.user_id,
        )

    async def set_hidden(
        self,
        space: ItemSpace,
        item_id: int,
        hidden: bool,
        principal: Principal | None,
    ) -> ContentItem:
        """Set the hidden flag (admin only, idempotent)."""
        self._require_admin(principal)

        item = await self.get(space, item_id)
        if item.hidden == hidden:
            return item

        now = datetime.now(UTC)
        if not await self.repository.set_hidden(space, item_id, hidden, now):
            raise NotFoundError("Item not found")

        item.hidden = hidden
        item.updated_at = now
        logger.info(
            "content_item_visibility_changed",
            space=space.value,
            item_id=item_id,
            hidden=hidden,
        )
        return item

    async def set_pinned(
        self,
        space: ItemSpace,
        item_id: int,
        pinned: bool,
        principal: Principal | None,
    ) -> ContentItem:
        """Set the pinned flag (admin only, idempotent)."""
        self._require_admin(principal)

        item = await self.get(space, item_id)
        if item.pinned == pinned:
            return item

        now = datetime.now(UTC)
        if not await self.repository.set_pinned(space, item_id, pinned, now):
            raise NotFoundError("Item not found")

        item.pinned = pinned
        item.updated_at = now
        logger.info(
            "content_item_pin_changed",
            space=space.value,
            item_id=item_id,
            pinned=pinned,
        )
        return item

    async def increment_view(self, space: ItemSpace, item_id: int) -> None:
        """Count one read. Never raises; unknown ids are ignored."""
        try:
            if await self.repository.get(space, item_id) is None:
                return
            await self.repository.increment_view(space, item_id)
        except Exception as e:
            logger.warning(
                "view_count_increment_failed",
                space=space.value,
                item_id=item_id,
                error=str(e),
            )

    @staticmethod
    def _require_admin(principal: Principal | None) -> None:
        if principal is None:
            raise AuthenticationRequiredError
        if not principal.is_admin:
            raise PermissionDeniedError("Admin role required")
