"""Report API endpoints.

Provides routes for:
- Reporting items and comments (authenticated users)
- The admin report queue and report resolution
"""

from fastapi import APIRouter, Query, status

from src.auth.dependencies import AdminUser, CurrentUser
from src.content.models import ItemSpace

from .dependencies import ReportServiceDep
from .models import ReportStatus, ReportTargetType
from .schemas import (
    CreateReportRequest,
    ReportListResponse,
    ReportResponse,
    ResolveReportRequest,
)


router = APIRouter(prefix="/v1/{space}", tags=["reports"])
admin_router = APIRouter(prefix="/v1/admin/reports", tags=["admin"])


@router.post(
    "/items/{item_id}/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report item",
)
async def report_item(
    space: ItemSpace,
    item_id: int,
    data: CreateReportRequest,
    service: ReportServiceDep,
    user: CurrentUser,
) -> ReportResponse:
    report = await service.file_report(
        space, user, ReportTargetType.CONTENT, item_id, data.reason
    )
    return ReportResponse.from_report(report)


@router.post(
    "/comments/{comment_id}/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report comment",
)
async def report_comment(
    space: ItemSpace,
    comment_id: int,
    data: CreateReportRequest,
    service: ReportServiceDep,
    user: CurrentUser,
) -> ReportResponse:
    report = await service.file_report(
        space, user, ReportTargetType.COMMENT, comment_id, data.reason
    )
    return ReportResponse.from_report(report)


# ==============================================================================
# Admin
# ==============================================================================


@admin_router.get(
    "",
    response_model=ReportListResponse,
    summary="List reports",
)
async def list_reports(
    service: ReportServiceDep,
    _admin: AdminUser,
    report_status: ReportStatus | None = Query(default=None, alias="status"),
    space: ItemSpace | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=100),
) -> ReportListResponse:
    """Report queue, newest first, optionally filtered by status and space."""
    result = await service.list_reports(
        status=report_status, space=space, page=page, size=size
    )
    return ReportListResponse.from_page(result)


@admin_router.get(
    "/{report_id}",
    response_model=ReportResponse,
    summary="Get report",
)
async def get_report(
    report_id: int,
    service: ReportServiceDep,
    _admin: AdminUser,
) -> ReportResponse:
    return ReportResponse.from_report(await service.get_report(report_id))


@admin_router.patch(
    "/{report_id}",
    response_model=ReportResponse,
    summary="Resolve report",
)
async def resolve_report(
    report_id: int,
    data: ResolveReportRequest,
    service: ReportServiceDep,
    admin: AdminUser,
) -> ReportResponse:
    """Accept (with the matching action) or reject a pending report.

    Accepting a content report hides the item; accepting a comment report
    soft deletes the comment.
    """
    report = await service.resolve(
        report_id, admin, data.status, action=data.action, note=data.note
    )
    return ReportResponse.from_report(report)
