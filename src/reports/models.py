"""Database models for user reports.

Cassandra table definitions for:
- Reports: the report rows, keyed by id
- Reports by status: moderation queue index, newest id first
- Reports by target: per-target history for report counts
- Pending reports: one slot per (reporter, target) while a report is PENDING

A report moves PENDING -> ACCEPTED | REJECTED exactly once and is never
deleted.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.content.models import ItemSpace


class ReportTargetType(str, Enum):
    """What a report points at."""

    CONTENT = "CONTENT"
    COMMENT = "COMMENT"


class ReportStatus(str, Enum):
    """Report workflow status."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ReportAction(str, Enum):
    """Moderation action taken when a report is accepted."""

    HIDE_CONTENT = "HIDE_CONTENT"
    DELETE_COMMENT = "DELETE_COMMENT"


# Accepted reports must carry the action matching their target type
ACTION_FOR_TARGET: dict[ReportTargetType, ReportAction] = {
    ReportTargetType.CONTENT: ReportAction.HIDE_CONTENT,
    ReportTargetType.COMMENT: ReportAction.DELETE_COMMENT,
}


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

REPORTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports (
    report_id BIGINT PRIMARY KEY,
    space TEXT,
    target_type TEXT,
    target_id BIGINT,
    item_id BIGINT,
    reporter_id BIGINT,
    reporter_nickname TEXT,
    reason TEXT,
    status TEXT,
    action_type TEXT,
    processed_by BIGINT,
    process_note TEXT,
    created_at TIMESTAMP,
    processed_at TIMESTAMP
)
"""

REPORTS_BY_STATUS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports_by_status (
    status TEXT,
    report_id BIGINT,
    space TEXT,
    PRIMARY KEY ((status), report_id)
) WITH CLUSTERING ORDER BY (report_id DESC)
"""

REPORTS_BY_TARGET_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.reports_by_target (
    space TEXT,
    target_type TEXT,
    target_id BIGINT,
    report_id BIGINT,
    status TEXT,
    PRIMARY KEY ((space, target_type, target_id), report_id)
)
"""

PENDING_REPORTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.pending_reports (
    space TEXT,
    reporter_id BIGINT,
    target_type TEXT,
    target_id BIGINT,
    report_id BIGINT,
    PRIMARY KEY ((space, reporter_id, target_type, target_id))
)
"""

REPORT_TABLES_CQL = [
    REPORTS_TABLE_CQL,
    REPORTS_BY_STATUS_TABLE_CQL,
    REPORTS_BY_TARGET_TABLE_CQL,
    PENDING_REPORTS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Report:
    """A user report against an item or a comment."""

    report_id: int
    space: ItemSpace
    target_type: ReportTargetType
    target_id: int
    item_id: int
    reporter_id: int
    reporter_nickname: str
    reason: str
    status: ReportStatus
    action_type: ReportAction | None
    processed_by: int | None
    process_note: str | None
    created_at: datetime
    processed_at: datetime | None

    @classmethod
    def from_row(cls, row: Any) -> "Report":
        """Create Report from Cassandra row."""
        return cls(
            report_id=row.report_id,
            space=ItemSpace(row.space),
            target_type=ReportTargetType(row.target_type),
            target_id=row.target_id,
            item_id=row.item_id,
            reporter_id=row.reporter_id,
            reporter_nickname=row.reporter_nickname or f"user{row.reporter_id}",
            reason=row.reason,
            status=ReportStatus(row.status),
            action_type=ReportAction(row.action_type) if row.action_type else None,
            processed_by=row.processed_by,
            process_note=row.process_note,
            created_at=row.created_at,
            processed_at=row.processed_at,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == ReportStatus.PENDING


@dataclass
class ReportIndexEntry:
    """Row of ``reports_by_status``."""

    report_id: int
    space: ItemSpace
    status: ReportStatus


@dataclass
class ReportPage:
    """One page of the report queue."""

    reports: list[Report]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @property
    def last(self) -> bool:
        return self.page >= self.total_pages - 1


def create_report(
    report_id: int,
    space: ItemSpace,
    target_type: ReportTargetType,
    target_id: int,
    item_id: int,
    reporter_id: int,
    reporter_nickname: str,
    reason: str,
) -> Report:
    """Create a new PENDING report."""
    return Report(
        report_id=report_id,
        space=space,
        target_type=target_type,
        target_id=target_id,
        item_id=item_id,
        reporter_id=reporter_id,
        reporter_nickname=reporter_nickname,
        reason=reason,
        status=ReportStatus.PENDING,
        action_type=None,
        processed_by=None,
        process_note=None,
        created_at=datetime.now(UTC),
        processed_at=None,
    )
