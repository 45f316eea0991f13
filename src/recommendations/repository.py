"""Cassandra persistence for recommendations."""

from typing import TYPE_CHECKING

from src.content.models import ItemSpace

from .models import Recommendation


if TYPE_CHECKING:
    from cassandra.cluster import Session


class RecommendationRepository:
    """Prepared statements for ``recommendations``."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.recommendations
            (space, item_id, user_id, created_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._delete = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.recommendations
            WHERE space = ? AND item_id = ? AND user_id = ?
            IF EXISTS
        """)

        self._exists = self.session.prepare(f"""
            SELECT user_id FROM {self.keyspace}.recommendations
            WHERE space = ? AND item_id = ? AND user_id = ?
        """)

        self._count = self.session.prepare(f"""
            SELECT COUNT(*) AS total FROM {self.keyspace}.recommendations
            WHERE space = ? AND item_id = ?
        """)

        self._delete_for_item = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.recommendations
            WHERE space = ? AND item_id = ?
        """)

    async def exists(self, space: ItemSpace, item_id: int, user_id: int) -> bool:
        result = await self.session.aexecute(
            self._exists, [space.value, item_id, user_id]
        )
        return result.one() is not None

    async def insert_if_absent(self, recommendation: Recommendation) -> bool:
        """Insert; False if the row already existed."""
        result = await self.session.aexecute(
            self._insert,
            [
                recommendation.space.value,
                recommendation.item_id,
                recommendation.user_id,
                recommendation.created_at,
            ],
        )
        return result.was_applied

    async def delete_if_present(
        self, space: ItemSpace, item_id: int, user_id: int
    ) -> bool:
        """Delete; False if there was nothing to delete."""
        result = await self.session.aexecute(
            self._delete, [space.value, item_id, user_id]
        )
        return result.was_applied

    async def count(self, space: ItemSpace, item_id: int) -> int:
        result = await self.session.aexecute(self._count, [space.value, item_id])
        row = result.one()
        return row.total if row else 0

    async def delete_for_item(self, space: ItemSpace, item_id: int) -> None:
        await self.session.aexecute(self._delete_for_item, [space.value, item_id])
