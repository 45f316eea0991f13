"""Tests for the comment service."""

from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

from src.comments.models import DELETED_PLACEHOLDER, CommentSort
from src.comments.service import CommentService
from src.content.models import ItemKind, ItemSpace
from src.core.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidNestingError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from src.core.rate_limit import RateLimiter


BOARD = ItemSpace.BOARD


@pytest_asyncio.fixture
async def item(services, alice):
    return await services.content_service.create(
        BOARD, alice, ItemKind.REVIEW, "Kimchi stew", "<p>spicy</p>"
    )


class TestAddComment:
    """Tests for comment creation."""

    @pytest.mark.asyncio
    async def test_add_top_level_comment(self, services, item, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "  looks good  "
        )

        assert comment.comment_id == 1
        assert comment.content == "looks good"
        assert comment.parent_id is None
        assert comment.author_nickname == "bob"

    @pytest.mark.asyncio
    async def test_anonymous_comment_rejected(self, services, item) -> None:
        with pytest.raises(AuthenticationRequiredError):
            await services.comment_service.add_comment(BOARD, item.item_id, None, "hi")

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, services, item, bob) -> None:
        with pytest.raises(ValidationError):
            await services.comment_service.add_comment(BOARD, item.item_id, bob, "   ")

    @pytest.mark.asyncio
    async def test_unknown_item(self, services, bob) -> None:
        with pytest.raises(NotFoundError):
            await services.comment_service.add_comment(BOARD, 404, bob, "hi")

    @pytest.mark.asyncio
    async def test_hidden_item_not_commentable(self, services, item, bob, admin) -> None:
        await services.content_service.set_hidden(BOARD, item.item_id, True, admin)
        with pytest.raises(NotFoundError):
            await services.comment_service.add_comment(BOARD, item.item_id, bob, "hi")

    @pytest.mark.asyncio
    async def test_reply_depth_is_capped(self, services, item, alice, bob) -> None:
        c1 = await services.comment_service.add_comment(BOARD, item.item_id, alice, "C1")
        c2 = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "C2", parent_id=c1.comment_id
        )
        assert c2.parent_id == c1.comment_id

        with pytest.raises(InvalidNestingError):
            await services.comment_service.add_comment(
                BOARD, item.item_id, alice, "C3", parent_id=c2.comment_id
            )

    @pytest.mark.asyncio
    async def test_parent_must_belong_to_same_item(
        self, services, item, alice, bob
    ) -> None:
        other = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Other", "body"
        )
        parent = await services.comment_service.add_comment(
            BOARD, other.item_id, bob, "elsewhere"
        )

        with pytest.raises(NotFoundError):
            await services.comment_service.add_comment(
                BOARD, item.item_id, bob, "reply", parent_id=parent.comment_id
            )

    @pytest.mark.asyncio
    async def test_deleted_comment_accepts_replies(
        self, services, item, alice, bob
    ) -> None:
        parent = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "first"
        )
        await services.comment_service.delete_comment(BOARD, parent.comment_id, alice)

        reply = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "still here", parent_id=parent.comment_id
        )
        assert reply.parent_id == parent.comment_id

    @pytest.mark.asyncio
    async def test_rate_limit(self, repositories, services, item, bob) -> None:
        redis = AsyncMock()
        redis.get = AsyncMock(return_value=b"10")
        limited = CommentService(
            repositories.comments,
            repositories.ids,
            services.content_service,
            rate_limiter=RateLimiter(redis, "comments", limit=10, window_seconds=60),
        )

        with pytest.raises(RateLimitExceededError):
            await limited.add_comment(BOARD, item.item_id, bob, "one too many")

    @pytest.mark.asyncio
    async def test_rate_limit_records_hit(
        self, repositories, services, item, bob
    ) -> None:
        pipe = Mock()
        pipe.execute = AsyncMock(return_value=[1, True])
        redis = AsyncMock()
        redis.get = AsyncMock(return_value=None)
        redis.pipeline = Mock(return_value=pipe)
        limited = CommentService(
            repositories.comments,
            repositories.ids,
            services.content_service,
            rate_limiter=RateLimiter(redis, "comments", limit=10, window_seconds=60),
        )

        await limited.add_comment(BOARD, item.item_id, bob, "ok")

        pipe.incr.assert_called_once_with("ratelimit:comments:2")
        pipe.expire.assert_called_once_with("ratelimit:comments:2", 60)


class TestEditComment:
    """Tests for comment edits."""

    @pytest.mark.asyncio
    async def test_author_edit(self, services, item, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "tpyo"
        )
        edited = await services.comment_service.edit_comment(
            BOARD, comment.comment_id, bob, "typo"
        )
        assert edited.content == "typo"
        assert edited.is_edited is True

    @pytest.mark.asyncio
    async def test_other_user_cannot_edit(self, services, item, alice, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "mine"
        )
        with pytest.raises(PermissionDeniedError):
            await services.comment_service.edit_comment(
                BOARD, comment.comment_id, alice, "yours"
            )

    @pytest.mark.asyncio
    async def test_edit_deleted_comment_conflicts(self, services, item, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "bye"
        )
        await services.comment_service.delete_comment(BOARD, comment.comment_id, bob)

        with pytest.raises(ConflictError):
            await services.comment_service.edit_comment(
                BOARD, comment.comment_id, bob, "back"
            )

    @pytest.mark.asyncio
    async def test_edit_unknown_comment(self, services, bob) -> None:
        with pytest.raises(NotFoundError):
            await services.comment_service.edit_comment(BOARD, 404, bob, "x")


class TestDeleteComment:
    """Tests for soft delete."""

    @pytest.mark.asyncio
    async def test_soft_delete_keeps_tree(self, services, item, alice, bob) -> None:
        parent = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "parent"
        )
        await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "child", parent_id=parent.comment_id
        )

        deleted = await services.comment_service.delete_comment(
            BOARD, parent.comment_id, alice
        )

        assert deleted.is_deleted is True
        assert deleted.content == DELETED_PLACEHOLDER
        tree = await services.comment_service.list_comments(BOARD, item.item_id)
        assert len(tree) == 1
        assert tree[0].comment.content == DELETED_PLACEHOLDER
        assert [c.content for c in tree[0].children] == ["child"]
        assert await services.comment_service.count_visible(BOARD, item.item_id) == 1

    @pytest.mark.asyncio
    async def test_delete_twice_is_noop(self, services, item, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "once"
        )
        first = await services.comment_service.delete_comment(
            BOARD, comment.comment_id, bob
        )
        second = await services.comment_service.delete_comment(
            BOARD, comment.comment_id, bob
        )

        assert second.is_deleted is True
        assert second.deleted_at == first.deleted_at
        assert await services.comment_service.count_visible(BOARD, item.item_id) == 0

    @pytest.mark.asyncio
    async def test_admin_can_delete(self, services, item, bob, admin) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "rude"
        )
        deleted = await services.comment_service.delete_comment(
            BOARD, comment.comment_id, admin
        )
        assert deleted.deleted_by == admin.user_id

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(self, services, item, alice, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "mine"
        )
        with pytest.raises(PermissionDeniedError):
            await services.comment_service.delete_comment(
                BOARD, comment.comment_id, alice
            )


class TestListComments:
    """Tests for tree ordering."""

    @pytest.mark.asyncio
    async def test_sort_orders(self, services, item, alice, bob) -> None:
        first = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "first"
        )
        second = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "second"
        )
        r1 = await services.comment_service.add_comment(
            BOARD, item.item_id, bob, "r1", parent_id=first.comment_id
        )
        r2 = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "r2", parent_id=first.comment_id
        )

        created = await services.comment_service.list_comments(
            BOARD, item.item_id, CommentSort.CREATED
        )
        latest = await services.comment_service.list_comments(
            BOARD, item.item_id, CommentSort.LATEST
        )

        assert [n.comment.comment_id for n in created] == [
            first.comment_id,
            second.comment_id,
        ]
        assert [n.comment.comment_id for n in latest] == [
            second.comment_id,
            first.comment_id,
        ]
        replies = [n for n in latest if n.comment.comment_id == first.comment_id][0]
        assert [c.comment_id for c in replies.children] == [r1.comment_id, r2.comment_id]

    @pytest.mark.asyncio
    async def test_list_for_unknown_item(self, services) -> None:
        with pytest.raises(NotFoundError):
            await services.comment_service.list_comments(BOARD, 404)
