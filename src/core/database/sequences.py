"""Integer id allocation on Cassandra.

Cassandra has no auto-increment, so each named sequence is a single row
advanced with a lightweight-transaction compare-and-set. A lost race simply
re-reads and retries.
"""

from typing import TYPE_CHECKING

import structlog


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


ID_SEQUENCES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.id_sequences (
    name TEXT PRIMARY KEY,
    next_id BIGINT
)
"""

SEQUENCE_TABLES_CQL = [ID_SEQUENCES_TABLE_CQL]


class IdAllocator:
    """Allocates strictly increasing integer ids per sequence name."""

    def __init__(self, session: "Session", keyspace: str, max_attempts: int = 32):
        self.session = session
        self.keyspace = keyspace
        self.max_attempts = max_attempts
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._select = self.session.prepare(f"""
            SELECT next_id FROM {self.keyspace}.id_sequences WHERE name = ?
        """)

        self._init = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.id_sequences (name, next_id)
            VALUES (?, ?)
            IF NOT EXISTS
        """)

        self._advance = self.session.prepare(f"""
            UPDATE {self.keyspace}.id_sequences
            SET next_id = ?
            WHERE name = ?
            IF next_id = ?
        """)

    async def next_id(self, name: str) -> int:
        """Allocate the next id of ``name`` (the first id is 1).

        Raises:
            RuntimeError: If every compare-and-set attempt lost a race
        """
        for _ in range(self.max_attempts):
            result = await self.session.aexecute(self._select, [name])
            row = result.one()

            if row is None:
                created = await self.session.aexecute(self._init, [name, 2])
                if created.was_applied:
                    return 1
                continue

            current = row.next_id
            advanced = await self.session.aexecute(
                self._advance, [current + 1, name, current]
            )
            if advanced.was_applied:
                return current

        logger.error("id_allocation_exhausted", sequence=name)
        msg = f"Could not allocate id for sequence {name!r}"
        raise RuntimeError(msg)
