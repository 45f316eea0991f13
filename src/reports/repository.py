"""Cassandra persistence for reports."""

from typing import TYPE_CHECKING

from src.content.models import ItemSpace

from .models import Report, ReportIndexEntry, ReportStatus, ReportTargetType


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ReportRepository:
    """Prepared statements for ``reports`` and its index tables.

    Status changes are conditional on the previous status, so two admins
    resolving the same report cannot both win.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_report = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports
            (report_id, space, target_type, target_id, item_id, reporter_id,
             reporter_nickname, reason, status, action_type, processed_by,
             process_note, created_at, processed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_report = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.reports WHERE report_id = ?
        """)

        self._get_report = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.reports WHERE report_id = ?
        """)

        self._list_reports = self.session.prepare(f"""
            SELECT report_id, space, status FROM {self.keyspace}.reports
        """)

        self._transition = self.session.prepare(f"""
            UPDATE {self.keyspace}.reports
            SET status = ?, action_type = ?, processed_by = ?, process_note = ?,
                processed_at = ?
            WHERE report_id = ?
            IF status = ?
        """)

        # Pending slot (one PENDING report per reporter and target)
        self._claim_slot = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.pending_reports
            (space, reporter_id, target_type, target_id, report_id)
            VALUES (?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._get_slot = self.session.prepare(f"""
            SELECT report_id FROM {self.keyspace}.pending_reports
            WHERE space = ? AND reporter_id = ? AND target_type = ? AND target_id = ?
        """)

        self._release_slot = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.pending_reports
            WHERE space = ? AND reporter_id = ? AND target_type = ? AND target_id = ?
            IF report_id = ?
        """)

        # Indexes
        self._insert_by_status = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports_by_status (status, report_id, space)
            VALUES (?, ?, ?)
        """)

        self._delete_by_status = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.reports_by_status
            WHERE status = ? AND report_id = ?
        """)

        self._list_by_status = self.session.prepare(f"""
            SELECT report_id, space FROM {self.keyspace}.reports_by_status
            WHERE status = ?
        """)

        self._upsert_by_target = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.reports_by_target
            (space, target_type, target_id, report_id, status)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._list_by_target = self.session.prepare(f"""
            SELECT report_id, status FROM {self.keyspace}.reports_by_target
            WHERE space = ? AND target_type = ? AND target_id = ?
        """)

    # ==========================================================================
    # Report rows
    # ==========================================================================

    async def insert(self, report: Report) -> None:
        await self.session.aexecute(
            self._insert_report,
            [
                report.report_id,
                report.space.value,
                report.target_type.value,
                report.target_id,
                report.item_id,
                report.reporter_id,
                report.reporter_nickname,
                report.reason,
                report.status.value,
                report.action_type.value if report.action_type else None,
                report.processed_by,
                report.process_note,
                report.created_at,
                report.processed_at,
            ],
        )

    async def discard(self, report_id: int) -> None:
        """Remove a row that never claimed its pending slot."""
        await self.session.aexecute(self._delete_report, [report_id])

    async def get(self, report_id: int) -> Report | None:
        result = await self.session.aexecute(self._get_report, [report_id])
        row = result.one()
        return Report.from_row(row) if row else None

    async def list_all(self) -> list[ReportIndexEntry]:
        rows = await self.session.aexecute(self._list_reports)
        return [
            ReportIndexEntry(
                report_id=row.report_id,
                space=ItemSpace(row.space),
                status=ReportStatus(row.status),
            )
            for row in rows
        ]

    async def transition(self, report: Report, expected: ReportStatus) -> bool:
        """Write the report's status fields if the stored status is ``expected``."""
        result = await self.session.aexecute(
            self._transition,
            [
                report.status.value,
                report.action_type.value if report.action_type else None,
                report.processed_by,
                report.process_note,
                report.processed_at,
                report.report_id,
                expected.value,
            ],
        )
        return result.was_applied

    # ==========================================================================
    # Pending slots
    # ==========================================================================

    async def claim_pending_slot(self, report: Report) -> bool:
        result = await self.session.aexecute(
            self._claim_slot,
            [
                report.space.value,
                report.reporter_id,
                report.target_type.value,
                report.target_id,
                report.report_id,
            ],
        )
        return result.was_applied

    async def find_pending_slot(
        self,
        space: ItemSpace,
        reporter_id: int,
        target_type: ReportTargetType,
        target_id: int,
    ) -> int | None:
        result = await self.session.aexecute(
            self._get_slot, [space.value, reporter_id, target_type.value, target_id]
        )
        row = result.one()
        return row.report_id if row else None

    async def release_pending_slot(self, report: Report) -> None:
        await self.session.aexecute(
            self._release_slot,
            [
                report.space.value,
                report.reporter_id,
                report.target_type.value,
                report.target_id,
                report.report_id,
            ],
        )

    # ==========================================================================
    # Indexes
    # ==========================================================================

    async def index(self, report: Report, previous: ReportStatus | None = None) -> None:
        """Write the status and target index rows, moving them from ``previous``."""
        if previous is not None and previous != report.status:
            await self.session.aexecute(
                self._delete_by_status, [previous.value, report.report_id]
            )
        await self.session.aexecute(
            self._insert_by_status,
            [report.status.value, report.report_id, report.space.value],
        )
        await self.session.aexecute(
            self._upsert_by_target,
            [
                report.space.value,
                report.target_type.value,
                report.target_id,
                report.report_id,
                report.status.value,
            ],
        )

    async def list_by_status(self, status: ReportStatus) -> list[ReportIndexEntry]:
        """Queue entries of one status, newest id first."""
        rows = await self.session.aexecute(self._list_by_status, [status.value])
        return [
            ReportIndexEntry(
                report_id=row.report_id,
                space=ItemSpace(row.space),
                status=status,
            )
            for row in rows
        ]

    async def list_for_target(
        self, space: ItemSpace, target_type: ReportTargetType, target_id: int
    ) -> list[ReportIndexEntry]:
        rows = await self.session.aexecute(
            self._list_by_target, [space.value, target_type.value, target_id]
        )
        return [
            ReportIndexEntry(
                report_id=row.report_id,
                space=space,
                status=ReportStatus(row.status),
            )
            for row in rows
        ]
