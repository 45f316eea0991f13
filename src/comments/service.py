"""Comment service layer.

Business logic for:
- Comment and reply creation (depth capped at one level)
- Author-or-admin edit and soft delete
- Comment tree assembly and visible counts
- Per-user rate limiting of new comments
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from src.auth.permissions import Principal, can_modify
from src.content.models import ItemSpace
from src.core.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidNestingError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

from .models import (
    DELETED_PLACEHOLDER,
    Comment,
    CommentNode,
    CommentSort,
    create_comment,
)


if TYPE_CHECKING:
    from src.content.service import ContentItemService
    from src.core.database.sequences import IdAllocator
    from src.core.rate_limit import RateLimiter

    from .repository import CommentRepository


logger = structlog.get_logger(__name__)


MAX_COMMENT_LENGTH = 10000


def comment_sequence(space: ItemSpace) -> str:
    """Id sequence name for comments of a space."""
    return f"{space.value}_comments"


def build_tree(comments: list[Comment], sort: CommentSort) -> list[CommentNode]:
    """Group comments under their top-level parent.

    Top-level comments follow ``sort``; replies are always oldest first.
    Replies whose parent is missing are dropped.

    >>> build_tree([], CommentSort.CREATED)
    []
    """
    nodes: dict[int, CommentNode] = {}
    replies: list[Comment] = []
    for comment in comments:
        if comment.parent_id is None:
            nodes[comment.comment_id] = CommentNode(comment=comment)
        else:
            replies.append(comment)

    for reply in sorted(replies, key=lambda c: c.sort_key):
        node = nodes.get(reply.parent_id)
        if node is not None:
            node.children.append(reply)

    return sorted(
        nodes.values(),
        key=lambda n: n.comment.sort_key,
        reverse=sort == CommentSort.LATEST,
    )


class CommentService:
    """Service for comment management."""

    def __init__(
        self,
        repository: "CommentRepository",
        ids: "IdAllocator",
        content_service: "ContentItemService",
        rate_limiter: "RateLimiter | None" = None,
    ):
        self.repository = repository
        self.ids = ids
        self.content_service = content_service
        self.rate_limiter = rate_limiter

    @staticmethod
    def _validated_content(content: str | None) -> str:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValidationError(
                f"Comment must be at most {MAX_COMMENT_LENGTH} characters"
            )
        return content

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def find(self, space: ItemSpace, comment_id: int) -> Comment | None:
        return await self.repository.get(space, comment_id)

    async def get(self, space: ItemSpace, comment_id: int) -> Comment:
        comment = await self.repository.get(space, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def list_comments(
        self,
        space: ItemSpace,
        item_id: int,
        sort: CommentSort = CommentSort.CREATED,
        principal: Principal | None = None,
    ) -> list[CommentNode]:
        """Comment tree of an item the caller can see."""
        await self.content_service.get_visible(space, item_id, principal)
        comments = await self.repository.list_for_item(space, item_id)
        return build_tree(comments, sort)

    async def count_visible(self, space: ItemSpace, item_id: int) -> int:
        """Number of comments and replies that are not soft deleted."""
        comments = await self.repository.list_for_item(space, item_id)
        return sum(1 for comment in comments if not comment.is_deleted)

    async def any_visible_matches(
        self, space: ItemSpace, item_id: int, keyword: str
    ) -> bool:
        """Whether a non-deleted comment contains ``keyword`` (case-insensitive)."""
        needle = keyword.casefold()
        comments = await self.repository.list_for_item(space, item_id)
        return any(
            needle in comment.content.casefold()
            for comment in comments
            if not comment.is_deleted
        )

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def add_comment(
        self,
        space: ItemSpace,
        item_id: int,
        principal: Principal | None,
        content: str,
        parent_id: int | None = None,
    ) -> Comment:
        """Create a comment, or a reply when ``parent_id`` is given.

        Raises:
            AuthenticationRequiredError: Without a principal
            ValidationError: If the content is empty after trimming
            NotFoundError: If the item is not visible or the parent is not
                a comment of the same item
            InvalidNestingError: If the parent is itself a reply
            RateLimitExceededError: If the author exceeded the write budget
        """
        if principal is None:
            raise AuthenticationRequiredError

        clean_content = self._validated_content(content)
        await self.content_service.get_visible(space, item_id, principal)

        if parent_id is not None:
            parent = await self.repository.get(space, parent_id)
            if parent is None or parent.item_id != item_id:
                raise NotFoundError("Parent comment not found")
            if parent.is_reply:
                raise InvalidNestingError

        if self.rate_limiter:
            await self.rate_limiter.check(principal.user_id)

        comment = create_comment(
            comment_id=await self.ids.next_id(comment_sequence(space)),
            space=space,
            item_id=item_id,
            author_id=principal.user_id,
            author_nickname=principal.nickname,
            content=clean_content,
            parent_id=parent_id,
        )
        await self.repository.insert(comment)

        if self.rate_limiter:
            await self.rate_limiter.hit(principal.user_id)

        logger.info(
            "comment_created",
            space=space.value,
            item_id=item_id,
            comment_id=comment.comment_id,
            parent_id=parent_id,
            author_id=principal.user_id,
        )
        return comment

    async def edit_comment(
        self,
        space: ItemSpace,
        comment_id: int,
        principal: Principal | None,
        content: str,
    ) -> Comment:
        """Replace the content of a live comment as its author or an admin."""
        if principal is None:
            raise AuthenticationRequiredError

        comment = await self.get(space, comment_id)
        if not can_modify(principal, comment):
            raise PermissionDeniedError("You can only edit your own comments")

        clean_content = self._validated_content(content)
        if comment.is_deleted:
            raise ConflictError("Deleted comments cannot be edited")

        now = datetime.now(UTC)
        if not await self.repository.update_content(comment, clean_content, now):
            raise ConflictError("Deleted comments cannot be edited")

        comment.content = clean_content
        comment.is_edited = True
        comment.updated_at = now

        logger.info(
            "comment_updated",
            space=space.value,
            comment_id=comment_id,
            actor_id=principal.user_id,
        )
        return comment

    async def delete_comment(
        self,
        space: ItemSpace,
        comment_id: int,
        principal: Principal | None,
    ) -> Comment:
        """Soft delete a comment. Deleting twice is a successful no-op."""
        if principal is None:
            raise AuthenticationRequiredError

        comment = await self.get(space, comment_id)
        if not can_modify(principal, comment):
            raise PermissionDeniedError("You can only delete your own comments")

        if comment.is_deleted:
            return comment

        now = datetime.now(UTC)
        applied = await self.repository.mark_deleted(
            comment, DELETED_PLACEHOLDER, principal.user_id, now
        )
        if not applied:
            return await self.get(space, comment_id)

        comment.content = DELETED_PLACEHOLDER
        comment.is_deleted = True
        comment.deleted_at = now
        comment.deleted_by = principal.user_id
        comment.updated_at = now

        logger.info(
            "comment_deleted",
            space=space.value,
            item_id=comment.item_id,
            comment_id=comment_id,
            actor_id=principal.user_id,
        )
        return comment

    async def purge_for_item(self, space: ItemSpace, item_id: int) -> None:
        """Physically remove all comments of a hard-deleted item."""
        removed = await self.repository.delete_for_item(space, item_id)
        logger.info(
            "comments_purged", space=space.value, item_id=item_id, count=removed
        )
