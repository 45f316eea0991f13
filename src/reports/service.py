"""Report workflow service layer.

Business logic for:
- Filing reports against items and comments (one PENDING per reporter/target)
- Admin resolution PENDING -> ACCEPTED | REJECTED with moderation hand-off
- Report queue listing and per-target counts

Resolution is claim-then-act: the status transition is claimed first with a
conditional write, then the moderation action runs. If the action fails the
claim is reverted and the error propagates.
"""

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

import structlog

from src.auth.permissions import Principal
from src.content.models import ItemSpace
from src.core.errors import (
    AuthenticationRequiredError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.schemas import page_count

from .models import (
    ACTION_FOR_TARGET,
    Report,
    ReportAction,
    ReportPage,
    ReportStatus,
    ReportTargetType,
    create_report,
)


if TYPE_CHECKING:
    from src.comments.service import CommentService
    from src.content.service import ContentItemService
    from src.core.database.sequences import IdAllocator
    from src.core.rate_limit import RateLimiter

    from .repository import ReportRepository


logger = structlog.get_logger(__name__)


REPORT_SEQUENCE = "reports"
MAX_REASON_LENGTH = 1000
MAX_NOTE_LENGTH = 1000


class ReportActionExecutor(Protocol):
    """Applies the moderation action of an accepted report."""

    async def apply_report_action(
        self,
        space: ItemSpace,
        action: ReportAction,
        target_type: ReportTargetType,
        target_id: int,
    ) -> None: ...


class ReportService:
    """Service for the report workflow."""

    def __init__(
        self,
        repository: "ReportRepository",
        ids: "IdAllocator",
        content_service: "ContentItemService",
        comment_service: "CommentService",
        executor: ReportActionExecutor,
        rate_limiter: "RateLimiter | None" = None,
    ):
        self.repository = repository
        self.ids = ids
        self.content_service = content_service
        self.comment_service = comment_service
        self.executor = executor
        self.rate_limiter = rate_limiter

    # ==========================================================================
    # Filing
    # ==========================================================================

    async def _resolve_target(
        self,
        space: ItemSpace,
        target_type: ReportTargetType,
        target_id: int,
        principal: Principal,
    ) -> tuple[int, int]:
        """Return ``(item_id, target_author_id)`` of a reportable target."""
        if target_type == ReportTargetType.CONTENT:
            item = await self.content_service.get_visible(space, target_id, principal)
            return item.item_id, item.author_id

        comment = await self.comment_service.find(space, target_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        await self.content_service.get_visible(space, comment.item_id, principal)
        return comment.item_id, comment.author_id

    async def file_report(
        self,
        space: ItemSpace,
        principal: Principal | None,
        target_type: ReportTargetType,
        target_id: int,
        reason: str,
    ) -> Report:
        """File a PENDING report.

        When a concurrent request by the same reporter already claimed the
        pending slot, its report is returned instead.

        Raises:
            AuthenticationRequiredError: Without a principal
            ValidationError: If the reason is empty after trimming
            NotFoundError: If the target (or its item) does not exist
            PermissionDeniedError: When reporting one's own item or comment
            ConflictError: If the reporter already has a PENDING report on it
            RateLimitExceededError: If the reporter exceeded the hourly budget
        """
        if principal is None:
            raise AuthenticationRequiredError

        clean_reason = (reason or "").strip()
        if not clean_reason:
            raise ValidationError("Report reason is required")
        if len(clean_reason) > MAX_REASON_LENGTH:
            raise ValidationError(
                f"Report reason must be at most {MAX_REASON_LENGTH} characters"
            )

        item_id, author_id = await self._resolve_target(
            space, target_type, target_id, principal
        )
        if author_id == principal.user_id:
            raise PermissionDeniedError("You cannot report your own post or comment")

        existing_id = await self.repository.find_pending_slot(
            space, principal.user_id, target_type, target_id
        )
        if existing_id is not None:
            existing = await self.repository.get(existing_id)
            if existing is not None and existing.is_pending:
                # Rewrites index rows a failed filing may have left out
                await self.repository.index(existing)
                raise ConflictError("You already have a pending report on this target")
            if existing is not None:
                await self.repository.index(existing, previous=ReportStatus.PENDING)
            await self._release_stale_slot(
                existing
                or create_report(
                    report_id=existing_id,
                    space=space,
                    target_type=target_type,
                    target_id=target_id,
                    item_id=item_id,
                    reporter_id=principal.user_id,
                    reporter_nickname=principal.nickname,
                    reason=clean_reason,
                )
            )

        if self.rate_limiter:
            await self.rate_limiter.check(principal.user_id)

        report = create_report(
            report_id=await self.ids.next_id(REPORT_SEQUENCE),
            space=space,
            target_type=target_type,
            target_id=target_id,
            item_id=item_id,
            reporter_id=principal.user_id,
            reporter_nickname=principal.nickname,
            reason=clean_reason,
        )
        await self.repository.insert(report)

        if not await self.repository.claim_pending_slot(report):
            await self.repository.discard(report.report_id)
            winner = await self._winning_report(report)
            logger.info(
                "report_filing_race_lost",
                space=space.value,
                target_type=target_type.value,
                target_id=target_id,
                report_id=winner.report_id,
            )
            return winner

        await self.repository.index(report)

        if self.rate_limiter:
            await self.rate_limiter.hit(principal.user_id)

        logger.info(
            "report_filed",
            report_id=report.report_id,
            space=space.value,
            target_type=target_type.value,
            target_id=target_id,
            reporter_id=principal.user_id,
        )
        return report

    async def _release_stale_slot(self, report: Report) -> None:
        """Free a pending slot still held by a resolved (or vanished) report."""
        await self.repository.release_pending_slot(report)
        logger.warning(
            "report_stale_slot_released",
            report_id=report.report_id,
            space=report.space.value,
            target_type=report.target_type.value,
            target_id=report.target_id,
        )

    async def _winning_report(self, report: Report) -> Report:
        winner_id = await self.repository.find_pending_slot(
            report.space, report.reporter_id, report.target_type, report.target_id
        )
        winner = await self.repository.get(winner_id) if winner_id else None
        if winner is None:
            raise ConflictError("You already have a pending report on this target")
        return winner

    # ==========================================================================
    # Resolution
    # ==========================================================================

    @staticmethod
    def _validated_decision(
        report: Report, decision: ReportStatus, action: ReportAction | None
    ) -> ReportAction | None:
        """Return the action to store for ``decision``."""
        if decision == ReportStatus.PENDING:
            raise ValidationError("Decision must be ACCEPTED or REJECTED")
        if decision == ReportStatus.REJECTED:
            return None
        if action is None:
            raise ValidationError("An action is required to accept a report")
        if action != ACTION_FOR_TARGET[report.target_type]:
            raise ValidationError(
                f"Action {action.value} does not apply to "
                f"{report.target_type.value} reports"
            )
        return action

    async def resolve(
        self,
        report_id: int,
        principal: Principal | None,
        decision: ReportStatus,
        action: ReportAction | None = None,
        note: str | None = None,
    ) -> Report:
        """Accept or reject a PENDING report.

        Raises:
            AuthenticationRequiredError: Without a principal
            PermissionDeniedError: If the caller is not an admin
            NotFoundError: If the report does not exist
            ConflictError: If the report is no longer PENDING
            ValidationError: On a PENDING decision or a missing/mismatched action
        """
        if principal is None:
            raise AuthenticationRequiredError
        if not principal.is_admin:
            raise PermissionDeniedError("Admin role required")

        report = await self.get_report(report_id)
        if not report.is_pending:
            raise ConflictError("Report has already been processed")

        stored_action = self._validated_decision(report, decision, action)
        clean_note = (note or "").strip() or None
        if clean_note and len(clean_note) > MAX_NOTE_LENGTH:
            raise ValidationError(
                f"Note must be at most {MAX_NOTE_LENGTH} characters"
            )

        resolved = replace(
            report,
            status=decision,
            action_type=stored_action,
            processed_by=principal.user_id,
            process_note=clean_note,
            processed_at=datetime.now(UTC),
        )
        if not await self.repository.transition(resolved, ReportStatus.PENDING):
            raise ConflictError("Report has already been processed")

        if stored_action is not None:
            try:
                await self.executor.apply_report_action(
                    report.space, stored_action, report.target_type, report.target_id
                )
            except Exception as e:
                await self.repository.transition(report, decision)
                logger.exception(
                    "report_resolution_rolled_back",
                    report_id=report_id,
                    action=stored_action.value,
                    error=str(e),
                )
                raise

        await self.repository.release_pending_slot(resolved)
        await self.repository.index(resolved, previous=ReportStatus.PENDING)

        logger.info(
            "report_resolved",
            report_id=report_id,
            status=decision.value,
            action=stored_action.value if stored_action else None,
            admin_id=principal.user_id,
        )
        return resolved

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_report(self, report_id: int) -> Report:
        report = await self.repository.get(report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    async def list_reports(
        self,
        status: ReportStatus | None = None,
        space: ItemSpace | None = None,
        page: int = 0,
        size: int = 20,
    ) -> ReportPage:
        """Report queue page, newest first."""
        if page < 0 or size < 1:
            raise ValidationError("Page must be >= 0 and size >= 1")

        if status is not None:
            entries = await self.repository.list_by_status(status)
        else:
            entries = await self.repository.list_all()

        if space is not None:
            entries = [entry for entry in entries if entry.space == space]
        entries.sort(key=lambda entry: entry.report_id, reverse=True)

        window = entries[page * size : (page + 1) * size]
        reports = []
        for entry in window:
            report = await self.repository.get(entry.report_id)
            if report is not None:
                reports.append(report)

        return ReportPage(
            reports=reports,
            page=page,
            size=size,
            total_elements=len(entries),
            total_pages=page_count(len(entries), size),
        )

    async def count_for_target(
        self, space: ItemSpace, target_type: ReportTargetType, target_id: int
    ) -> tuple[int, int]:
        """Return ``(total, outstanding)`` report counts for a target."""
        entries = await self.repository.list_for_target(space, target_type, target_id)
        outstanding = sum(1 for entry in entries if entry.status == ReportStatus.PENDING)
        return len(entries), outstanding
