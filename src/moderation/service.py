"""Moderation action executor.

Applies hide/restore and pin/unpin on behalf of admins, and the action of an
accepted report on behalf of the system. Every action is idempotent; a
target that no longer exists is a no-op for report actions.
"""

from typing import TYPE_CHECKING

import structlog

from src.auth.permissions import SYSTEM_PRINCIPAL, Principal
from src.content.models import ContentItem, ItemSpace
from src.core.errors import AuthenticationRequiredError, PermissionDeniedError
from src.reports.models import ReportAction, ReportTargetType


if TYPE_CHECKING:
    from src.comments.service import CommentService
    from src.content.service import ContentItemService


logger = structlog.get_logger(__name__)


class ModerationService:
    """Service for moderation actions."""

    def __init__(
        self,
        content_service: "ContentItemService",
        comment_service: "CommentService",
    ):
        self.content_service = content_service
        self.comment_service = comment_service

    @staticmethod
    def _require_admin(principal: Principal | None) -> Principal:
        if principal is None:
            raise AuthenticationRequiredError
        if not principal.is_admin:
            raise PermissionDeniedError("Admin role required")
        return principal

    async def apply_report_action(
        self,
        space: ItemSpace,
        action: ReportAction,
        target_type: ReportTargetType,
        target_id: int,
    ) -> None:
        """Apply an accepted report's action as the system principal."""
        if action == ReportAction.HIDE_CONTENT:
            if await self.content_service.find(space, target_id) is None:
                logger.info(
                    "moderation_target_missing",
                    space=space.value,
                    action=action.value,
                    target_id=target_id,
                )
                return
            await self.content_service.set_hidden(
                space, target_id, True, SYSTEM_PRINCIPAL
            )
        elif action == ReportAction.DELETE_COMMENT:
            if await self.comment_service.find(space, target_id) is None:
                logger.info(
                    "moderation_target_missing",
                    space=space.value,
                    action=action.value,
                    target_id=target_id,
                )
                return
            await self.comment_service.delete_comment(
                space, target_id, SYSTEM_PRINCIPAL
            )

        logger.info(
            "moderation_action_applied",
            space=space.value,
            action=action.value,
            target_type=target_type.value,
            target_id=target_id,
            actor_id=SYSTEM_PRINCIPAL.user_id,
        )

    async def manual_hide(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ContentItem:
        """Hide an item. Pending reports against it are left untouched."""
        admin = self._require_admin(principal)
        item = await self.content_service.set_hidden(space, item_id, True, admin)
        self._log_manual("hide", space, item_id, admin)
        return item

    async def manual_restore(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ContentItem:
        admin = self._require_admin(principal)
        item = await self.content_service.set_hidden(space, item_id, False, admin)
        self._log_manual("restore", space, item_id, admin)
        return item

    async def pin(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ContentItem:
        admin = self._require_admin(principal)
        item = await self.content_service.set_pinned(space, item_id, True, admin)
        self._log_manual("pin", space, item_id, admin)
        return item

    async def unpin(
        self, space: ItemSpace, item_id: int, principal: Principal | None
    ) -> ContentItem:
        admin = self._require_admin(principal)
        item = await self.content_service.set_pinned(space, item_id, False, admin)
        self._log_manual("unpin", space, item_id, admin)
        return item

    @staticmethod
    def _log_manual(
        action: str, space: ItemSpace, item_id: int, admin: Principal
    ) -> None:
        logger.info(
            "moderation_action_applied",
            space=space.value,
            action=action,
            target_type=ReportTargetType.CONTENT.value,
            target_id=item_id,
            actor_id=admin.user_id,
        )
