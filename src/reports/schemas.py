"""Pydantic schemas for reports."""

from datetime import datetime

from pydantic import Field

from src.content.models import ItemSpace
from src.core.schemas import CamelModel

from .models import Report, ReportAction, ReportPage, ReportStatus, ReportTargetType


class CreateReportRequest(CamelModel):
    """Request to report an item or a comment."""

    reason: str = Field(..., max_length=1000)


class ResolveReportRequest(CamelModel):
    """Admin decision on a pending report."""

    status: ReportStatus
    action: ReportAction | None = None
    note: str | None = Field(None, max_length=1000)


class ReportResponse(CamelModel):
    """Report as shown to its reporter and to admins."""

    id: int
    space: ItemSpace
    target_type: ReportTargetType
    target_id: int
    item_id: int
    reporter_id: int
    reporter_nickname: str
    reason: str
    status: ReportStatus
    action_type: ReportAction | None = None
    processed_by: int | None = None
    process_note: str | None = None
    created_at: datetime
    processed_at: datetime | None = None

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        """Create response from Report entity."""
        return cls(
            id=report.report_id,
            space=report.space,
            target_type=report.target_type,
            target_id=report.target_id,
            item_id=report.item_id,
            reporter_id=report.reporter_id,
            reporter_nickname=report.reporter_nickname,
            reason=report.reason,
            status=report.status,
            action_type=report.action_type,
            processed_by=report.processed_by,
            process_note=report.process_note,
            created_at=report.created_at,
            processed_at=report.processed_at,
        )


class ReportListResponse(CamelModel):
    """Paginated report queue."""

    reports: list[ReportResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int
    last: bool

    @classmethod
    def from_page(cls, page: ReportPage) -> "ReportListResponse":
        return cls(
            reports=[ReportResponse.from_report(r) for r in page.reports],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            last=page.last,
        )
