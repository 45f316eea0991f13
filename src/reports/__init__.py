"""User reports and their admin resolution workflow.

Note: Routers are not exported here to avoid circular imports.
Import directly from src.reports.router when needed.
"""

from .models import (
    REPORT_TABLES_CQL,
    Report,
    ReportAction,
    ReportStatus,
    ReportTargetType,
)
from .service import ReportService


__all__ = [
    "REPORT_TABLES_CQL",
    "Report",
    "ReportAction",
    "ReportService",
    "ReportStatus",
    "ReportTargetType",
]
