"""Tests for the report workflow."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.comments.models import DELETED_PLACEHOLDER
from src.content.models import ItemKind, ItemSpace
from src.core.errors import (
    AuthenticationRequiredError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.reports.models import ReportAction, ReportStatus, ReportTargetType
from src.reports.service import ReportService


BOARD = ItemSpace.BOARD
CONTENT = ReportTargetType.CONTENT
COMMENT = ReportTargetType.COMMENT


@pytest_asyncio.fixture
async def item(services, alice):
    return await services.content_service.create(
        BOARD, alice, ItemKind.REVIEW, "Tteokbokki", "<p>sweet and spicy</p>"
    )


class TestFileReport:
    """Tests for filing reports."""

    @pytest.mark.asyncio
    async def test_file_report_on_item(self, services, item, bob) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "  spam  "
        )

        assert report.status == ReportStatus.PENDING
        assert report.reason == "spam"
        assert report.item_id == item.item_id
        assert report.reporter_nickname == "bob"
        assert report.action_type is None
        assert await services.report_service.count_for_target(
            BOARD, CONTENT, item.item_id
        ) == (1, 1)

    @pytest.mark.asyncio
    async def test_file_report_on_comment(self, services, item, alice, bob) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "buy my stuff"
        )
        report = await services.report_service.file_report(
            BOARD, bob, COMMENT, comment.comment_id, "advertising"
        )
        assert report.target_id == comment.comment_id
        assert report.item_id == item.item_id

    @pytest.mark.asyncio
    async def test_duplicate_pending_report_conflicts(self, services, item, bob) -> None:
        await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        with pytest.raises(ConflictError):
            await services.report_service.file_report(
                BOARD, bob, CONTENT, item.item_id, "spam again"
            )

    @pytest.mark.asyncio
    async def test_re_report_after_resolution(self, services, item, bob, admin) -> None:
        first = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        await services.report_service.resolve(
            first.report_id, admin, ReportStatus.REJECTED
        )

        second = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "still spam"
        )
        assert second.report_id != first.report_id
        assert await services.report_service.count_for_target(
            BOARD, CONTENT, item.item_id
        ) == (2, 1)

    @pytest.mark.asyncio
    async def test_re_report_after_failed_slot_release(
        self, repositories, services, item, bob, admin, monkeypatch
    ) -> None:
        release = repositories.reports.release_pending_slot
        failures = [RuntimeError("store down")]

        async def flaky_release(report):
            if failures:
                raise failures.pop()
            await release(report)

        monkeypatch.setattr(repositories.reports, "release_pending_slot", flaky_release)
        first = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        with pytest.raises(RuntimeError, match="store down"):
            await services.report_service.resolve(
                first.report_id, admin, ReportStatus.REJECTED
            )
        assert (await services.report_service.get_report(first.report_id)).status == (
            ReportStatus.REJECTED
        )

        second = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "still spam"
        )

        assert second.report_id != first.report_id
        assert second.status == ReportStatus.PENDING
        rejected = await services.report_service.list_reports(status=ReportStatus.REJECTED)
        assert [r.report_id for r in rejected.reports] == [first.report_id]
        pending = await services.report_service.list_reports(status=ReportStatus.PENDING)
        assert [r.report_id for r in pending.reports] == [second.report_id]

    @pytest.mark.asyncio
    async def test_duplicate_repairs_missing_queue_entry(
        self, repositories, services, item, bob, monkeypatch
    ) -> None:
        index = repositories.reports.index
        failures = [RuntimeError("store down")]

        async def flaky_index(report, previous=None):
            if failures:
                raise failures.pop()
            await index(report, previous=previous)

        monkeypatch.setattr(repositories.reports, "index", flaky_index)
        with pytest.raises(RuntimeError, match="store down"):
            await services.report_service.file_report(
                BOARD, bob, CONTENT, item.item_id, "spam"
            )
        queue = await services.report_service.list_reports(status=ReportStatus.PENDING)
        assert queue.reports == []

        with pytest.raises(ConflictError):
            await services.report_service.file_report(
                BOARD, bob, CONTENT, item.item_id, "spam again"
            )

        queue = await services.report_service.list_reports(status=ReportStatus.PENDING)
        assert [r.reason for r in queue.reports] == ["spam"]

    @pytest.mark.asyncio
    async def test_self_report_forbidden(self, services, item, alice) -> None:
        with pytest.raises(PermissionDeniedError):
            await services.report_service.file_report(
                BOARD, alice, CONTENT, item.item_id, "oops"
            )

    @pytest.mark.asyncio
    async def test_empty_reason(self, services, item, bob) -> None:
        with pytest.raises(ValidationError):
            await services.report_service.file_report(
                BOARD, bob, CONTENT, item.item_id, "   "
            )

    @pytest.mark.asyncio
    async def test_unknown_targets(self, services, bob) -> None:
        with pytest.raises(NotFoundError):
            await services.report_service.file_report(BOARD, bob, CONTENT, 404, "x")
        with pytest.raises(NotFoundError):
            await services.report_service.file_report(BOARD, bob, COMMENT, 404, "x")

    @pytest.mark.asyncio
    async def test_anonymous(self, services, item) -> None:
        with pytest.raises(AuthenticationRequiredError):
            await services.report_service.file_report(
                BOARD, None, CONTENT, item.item_id, "x"
            )

    @pytest.mark.asyncio
    async def test_lost_slot_race_returns_winner(
        self, services, repositories, item, bob
    ) -> None:
        winner = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        # Simulate a request that passed the pending check before the winner
        repositories.reports.find_pending_slot = AsyncMock(
            side_effect=[None, winner.report_id]
        )

        result = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )

        assert result.report_id == winner.report_id
        assert len(repositories.reports.reports) == 1


class TestResolve:
    """Tests for report resolution."""

    @pytest.mark.asyncio
    async def test_accept_hides_item(self, services, item, bob, admin) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "offensive"
        )

        resolved = await services.report_service.resolve(
            report.report_id,
            admin,
            ReportStatus.ACCEPTED,
            action=ReportAction.HIDE_CONTENT,
            note="  confirmed ",
        )

        assert resolved.status == ReportStatus.ACCEPTED
        assert resolved.action_type == ReportAction.HIDE_CONTENT
        assert resolved.processed_by == admin.user_id
        assert resolved.processed_at is not None
        assert resolved.process_note == "confirmed"
        assert (await services.content_service.get(BOARD, item.item_id)).hidden is True
        assert await services.report_service.count_for_target(
            BOARD, CONTENT, item.item_id
        ) == (1, 0)

    @pytest.mark.asyncio
    async def test_accept_deletes_comment(
        self, services, item, alice, bob, admin
    ) -> None:
        comment = await services.comment_service.add_comment(
            BOARD, item.item_id, alice, "insult"
        )
        report = await services.report_service.file_report(
            BOARD, bob, COMMENT, comment.comment_id, "abuse"
        )

        await services.report_service.resolve(
            report.report_id,
            admin,
            ReportStatus.ACCEPTED,
            action=ReportAction.DELETE_COMMENT,
        )

        stored = await services.comment_service.get(BOARD, comment.comment_id)
        assert stored.is_deleted is True
        assert stored.content == DELETED_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_reject_stores_no_action(self, services, item, bob, admin) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "meh"
        )
        resolved = await services.report_service.resolve(
            report.report_id,
            admin,
            ReportStatus.REJECTED,
            action=ReportAction.HIDE_CONTENT,
        )

        assert resolved.status == ReportStatus.REJECTED
        assert resolved.action_type is None
        assert (await services.content_service.get(BOARD, item.item_id)).hidden is False

    @pytest.mark.asyncio
    async def test_resolve_twice_conflicts_and_acts_once(
        self, repositories, services, item, bob, admin
    ) -> None:
        executor = AsyncMock()
        workflow = ReportService(
            repositories.reports,
            repositories.ids,
            services.content_service,
            services.comment_service,
            executor=executor,
        )
        report = await workflow.file_report(BOARD, bob, CONTENT, item.item_id, "spam")

        await workflow.resolve(
            report.report_id, admin, ReportStatus.ACCEPTED, ReportAction.HIDE_CONTENT
        )
        with pytest.raises(ConflictError):
            await workflow.resolve(
                report.report_id, admin, ReportStatus.REJECTED
            )

        executor.apply_report_action.assert_awaited_once_with(
            BOARD, ReportAction.HIDE_CONTENT, CONTENT, item.item_id
        )
        assert (await workflow.get_report(report.report_id)).status == (
            ReportStatus.ACCEPTED
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "decision,action",
        [
            (ReportStatus.PENDING, None),
            (ReportStatus.ACCEPTED, None),
            (ReportStatus.ACCEPTED, ReportAction.DELETE_COMMENT),
        ],
    )
    async def test_invalid_decisions(
        self, services, item, bob, admin, decision, action
    ) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        with pytest.raises(ValidationError):
            await services.report_service.resolve(
                report.report_id, admin, decision, action=action
            )
        assert (await services.report_service.get_report(report.report_id)).is_pending

    @pytest.mark.asyncio
    async def test_non_admin_cannot_resolve(self, services, item, bob) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        with pytest.raises(PermissionDeniedError):
            await services.report_service.resolve(
                report.report_id, bob, ReportStatus.REJECTED
            )

    @pytest.mark.asyncio
    async def test_unknown_report(self, services, admin) -> None:
        with pytest.raises(NotFoundError):
            await services.report_service.resolve(404, admin, ReportStatus.REJECTED)

    @pytest.mark.asyncio
    async def test_failed_action_reverts_to_pending(
        self, repositories, services, item, bob, admin
    ) -> None:
        executor = AsyncMock()
        executor.apply_report_action.side_effect = RuntimeError("store down")
        workflow = ReportService(
            repositories.reports,
            repositories.ids,
            services.content_service,
            services.comment_service,
            executor=executor,
        )
        report = await workflow.file_report(BOARD, bob, CONTENT, item.item_id, "spam")

        with pytest.raises(RuntimeError, match="store down"):
            await workflow.resolve(
                report.report_id,
                admin,
                ReportStatus.ACCEPTED,
                ReportAction.HIDE_CONTENT,
            )

        reverted = await workflow.get_report(report.report_id)
        assert reverted.status == ReportStatus.PENDING
        assert reverted.action_type is None
        assert reverted.processed_by is None
        # The pending slot is still held, so a duplicate is still refused
        with pytest.raises(ConflictError):
            await workflow.file_report(BOARD, bob, CONTENT, item.item_id, "spam")

    @pytest.mark.asyncio
    async def test_accept_after_target_deleted(
        self, services, item, alice, bob, admin
    ) -> None:
        report = await services.report_service.file_report(
            BOARD, bob, CONTENT, item.item_id, "spam"
        )
        await services.content_service.hard_delete(BOARD, item.item_id, alice)

        resolved = await services.report_service.resolve(
            report.report_id, admin, ReportStatus.ACCEPTED, ReportAction.HIDE_CONTENT
        )

        assert resolved.status == ReportStatus.ACCEPTED


class TestListReports:
    """Tests for the report queue."""

    @pytest.mark.asyncio
    async def test_filter_and_paginate(self, services, alice, bob, admin) -> None:
        items = [
            await services.content_service.create(
                BOARD, alice, ItemKind.REVIEW, f"Post {n}", "body"
            )
            for n in range(3)
        ]
        blog_item = await services.content_service.create(
            ItemSpace.BLOG, alice, ItemKind.REVIEW, "Blog post", "body"
        )
        reports = [
            await services.report_service.file_report(
                BOARD, bob, CONTENT, item.item_id, "spam"
            )
            for item in items
        ]
        await services.report_service.file_report(
            ItemSpace.BLOG, bob, CONTENT, blog_item.item_id, "spam"
        )
        await services.report_service.resolve(
            reports[0].report_id, admin, ReportStatus.REJECTED
        )

        pending = await services.report_service.list_reports(
            status=ReportStatus.PENDING, space=BOARD, page=0, size=1
        )
        assert pending.total_elements == 2
        assert pending.total_pages == 2
        assert pending.last is False
        assert [r.report_id for r in pending.reports] == [reports[2].report_id]

        everything = await services.report_service.list_reports(page=0, size=10)
        assert everything.total_elements == 4
        assert everything.last is True
        ids = [r.report_id for r in everything.reports]
        assert ids == sorted(ids, reverse=True)

        rejected = await services.report_service.list_reports(
            status=ReportStatus.REJECTED
        )
        assert [r.report_id for r in rejected.reports] == [reports[0].report_id]
