"""Tests for the content item service."""

import pytest

from src.content.models import ItemKind, ItemSpace
from src.core.errors import (
    AuthenticationRequiredError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


BOARD = ItemSpace.BOARD


class TestCreate:
    """Tests for item creation."""

    @pytest.mark.asyncio
    async def test_create_stores_trimmed_title(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "  Great noodles  ", "<p>tasty</p>"
        )

        assert item.item_id == 1
        assert item.title == "Great noodles"
        assert item.author_id == alice.user_id
        assert item.author_nickname == "alice"
        assert item.hidden is False
        assert item.pinned is False

    @pytest.mark.asyncio
    async def test_ids_are_allocated_per_space(self, services, alice) -> None:
        board = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Board post", "body"
        )
        blog = await services.content_service.create(
            ItemSpace.BLOG, alice, ItemKind.REVIEW, "Blog post", "body"
        )
        assert board.item_id == 1
        assert blog.item_id == 1

    @pytest.mark.asyncio
    async def test_anonymous_create_requires_authentication(self, services) -> None:
        with pytest.raises(AuthenticationRequiredError):
            await services.content_service.create(
                BOARD, None, ItemKind.REVIEW, "Title", "body"
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "a", " b "])
    async def test_short_title_rejected(self, services, alice, title) -> None:
        with pytest.raises(ValidationError):
            await services.content_service.create(
                BOARD, alice, ItemKind.REVIEW, title, "body"
            )

    @pytest.mark.asyncio
    async def test_empty_body_rejected(self, services, alice) -> None:
        with pytest.raises(ValidationError):
            await services.content_service.create(
                BOARD, alice, ItemKind.REVIEW, "Title", "<p> &nbsp; </p>"
            )

    @pytest.mark.asyncio
    async def test_media_only_body_accepted(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Photo", '<p><img src="x.png"></p>'
        )
        assert item.has_media is True

    @pytest.mark.asyncio
    async def test_notice_requires_admin(self, services, alice, admin) -> None:
        with pytest.raises(PermissionDeniedError):
            await services.content_service.create(
                BOARD, alice, ItemKind.NOTICE, "Notice", "body"
            )

        notice = await services.content_service.create(
            BOARD, admin, ItemKind.NOTICE, "Notice", "body"
        )
        assert notice.kind == ItemKind.NOTICE


class TestUpdate:
    """Tests for item edits."""

    @pytest.mark.asyncio
    async def test_author_can_edit(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )

        updated = await services.content_service.update(
            BOARD, item.item_id, alice, "New title", "new body"
        )

        assert updated.title == "New title"
        assert updated.created_at == item.created_at
        assert updated.updated_at >= item.updated_at
        stored = await services.content_service.get(BOARD, item.item_id)
        assert stored.body == "new body"

    @pytest.mark.asyncio
    async def test_other_user_cannot_edit(self, services, alice, bob) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        with pytest.raises(PermissionDeniedError):
            await services.content_service.update(
                BOARD, item.item_id, bob, "Hijack", "body"
            )

    @pytest.mark.asyncio
    async def test_admin_can_edit(self, services, alice, admin) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        updated = await services.content_service.update(
            BOARD, item.item_id, admin, "Fixed title", "body"
        )
        assert updated.title == "Fixed title"
        assert updated.author_id == alice.user_id

    @pytest.mark.asyncio
    async def test_edit_unknown_item(self, services, alice) -> None:
        with pytest.raises(NotFoundError):
            await services.content_service.update(BOARD, 42, alice, "Title", "body")

    @pytest.mark.asyncio
    async def test_user_cannot_switch_to_notice(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        with pytest.raises(PermissionDeniedError):
            await services.content_service.update(
                BOARD, item.item_id, alice, "Title", "body", kind=ItemKind.NOTICE
            )


class TestHardDelete:
    """Tests for hard delete and its cascade."""

    @pytest.mark.asyncio
    async def test_delete_cascades(self, services, repositories, alice, bob) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        await services.comment_service.add_comment(BOARD, item.item_id, bob, "hi")
        await services.recommendation_service.toggle(BOARD, item.item_id, bob)
        await services.content_service.increment_view(BOARD, item.item_id)

        await services.content_service.hard_delete(BOARD, item.item_id, alice)

        assert await services.content_service.find(BOARD, item.item_id) is None
        assert repositories.comments.comments == {}
        assert repositories.recommendations.rows == {}
        assert await services.content_service.view_count(BOARD, item.item_id) == 0
        with pytest.raises(NotFoundError):
            await services.content_service.update(
                BOARD, item.item_id, alice, "Title", "body"
            )

    @pytest.mark.asyncio
    async def test_failed_cascade_can_be_retried(
        self, services, repositories, alice, bob, monkeypatch
    ) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        await services.recommendation_service.toggle(BOARD, item.item_id, bob)
        purge = repositories.recommendations.delete_for_item
        failures = [RuntimeError("store down")]

        async def flaky_purge(space, item_id):
            if failures:
                raise failures.pop()
            await purge(space, item_id)

        monkeypatch.setattr(repositories.recommendations, "delete_for_item", flaky_purge)

        with pytest.raises(RuntimeError, match="store down"):
            await services.content_service.hard_delete(BOARD, item.item_id, alice)
        assert await services.content_service.find(BOARD, item.item_id) is not None

        await services.content_service.hard_delete(BOARD, item.item_id, alice)

        assert await services.content_service.find(BOARD, item.item_id) is None
        assert repositories.recommendations.rows == {}

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(self, services, alice, bob) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        with pytest.raises(PermissionDeniedError):
            await services.content_service.hard_delete(BOARD, item.item_id, bob)


class TestFlags:
    """Tests for hidden/pinned flags."""

    @pytest.mark.asyncio
    async def test_set_hidden_is_idempotent(self, services, alice, admin) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )

        first = await services.content_service.set_hidden(
            BOARD, item.item_id, True, admin
        )
        second = await services.content_service.set_hidden(
            BOARD, item.item_id, True, admin
        )

        assert first.hidden is True
        assert second.hidden is True
        assert second.updated_at == first.updated_at
        assert second.created_at == item.created_at

    @pytest.mark.asyncio
    async def test_set_hidden_requires_admin(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        with pytest.raises(PermissionDeniedError):
            await services.content_service.set_hidden(BOARD, item.item_id, True, alice)

    @pytest.mark.asyncio
    async def test_hidden_item_visibility(self, services, alice, bob, admin) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        await services.content_service.set_hidden(BOARD, item.item_id, True, admin)

        with pytest.raises(NotFoundError):
            await services.content_service.get_visible(BOARD, item.item_id, bob)
        with pytest.raises(NotFoundError):
            await services.content_service.get_visible(BOARD, item.item_id, None)
        assert (await services.content_service.get_visible(BOARD, item.item_id, alice)).hidden
        assert (await services.content_service.get_visible(BOARD, item.item_id, admin)).hidden

    @pytest.mark.asyncio
    async def test_set_pinned(self, services, alice, admin) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        pinned = await services.content_service.set_pinned(
            BOARD, item.item_id, True, admin
        )
        assert pinned.pinned is True

        unpinned = await services.content_service.set_pinned(
            BOARD, item.item_id, False, admin
        )
        assert unpinned.pinned is False


class TestViews:
    """Tests for best-effort view counting."""

    @pytest.mark.asyncio
    async def test_increment_view(self, services, alice) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )
        await services.content_service.increment_view(BOARD, item.item_id)
        await services.content_service.increment_view(BOARD, item.item_id)
        assert await services.content_service.view_count(BOARD, item.item_id) == 2

    @pytest.mark.asyncio
    async def test_unknown_item_is_ignored(self, services) -> None:
        await services.content_service.increment_view(BOARD, 404)
        assert await services.content_service.view_count(BOARD, 404) == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_swallowed(
        self, services, repositories, alice
    ) -> None:
        item = await services.content_service.create(
            BOARD, alice, ItemKind.REVIEW, "Title", "body"
        )

        async def broken(*_args):
            raise RuntimeError("counter unavailable")

        repositories.content.increment_view = broken

        await services.content_service.increment_view(BOARD, item.item_id)
