"""Cassandra persistence for content items."""

from datetime import datetime
from typing import TYPE_CHECKING

from .models import ContentItem, ItemSpace


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ContentItemRepository:
    """Prepared statements and row mapping for ``content_items``.

    Updates are conditional (``IF EXISTS``) so a concurrent hard delete is
    never resurrected by Cassandra's upsert semantics.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_item = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.content_items
            (space, item_id, kind, title, body, author_id, author_nickname,
             hidden, pinned, has_media, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_item = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.content_items
            WHERE space = ? AND item_id = ?
        """)

        self._list_items = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.content_items
            WHERE space = ?
        """)

        self._update_content = self.session.prepare(f"""
            UPDATE {self.keyspace}.content_items
            SET kind = ?, title = ?, body = ?, has_media = ?, updated_at = ?
            WHERE space = ? AND item_id = ?
            IF EXISTS
        """)

        self._set_hidden = self.session.prepare(f"""
            UPDATE {self.keyspace}.content_items
            SET hidden = ?, updated_at = ?
            WHERE space = ? AND item_id = ?
            IF EXISTS
        """)

        self._set_pinned = self.session.prepare(f"""
            UPDATE {self.keyspace}.content_items
            SET pinned = ?, updated_at = ?
            WHERE space = ? AND item_id = ?
            IF EXISTS
        """)

        self._delete_item = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.content_items
            WHERE space = ? AND item_id = ?
        """)

        # View counters
        self._incr_views = self.session.prepare(f"""
            UPDATE {self.keyspace}.content_item_views
            SET view_count = view_count + 1
            WHERE space = ? AND item_id = ?
        """)

        self._get_views = self.session.prepare(f"""
            SELECT view_count FROM {self.keyspace}.content_item_views
            WHERE space = ? AND item_id = ?
        """)

        self._delete_views = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.content_item_views
            WHERE space = ? AND item_id = ?
        """)

    async def insert(self, item: ContentItem) -> None:
        await self.session.aexecute(
            self._insert_item,
            [
                item.space.value,
                item.item_id,
                item.kind.value,
                item.title,
                item.body,
                item.author_id,
                item.author_nickname,
                item.hidden,
                item.pinned,
                item.has_media,
                item.created_at,
                item.updated_at,
            ],
        )

    async def get(self, space: ItemSpace, item_id: int) -> ContentItem | None:
        result = await self.session.aexecute(self._get_item, [space.value, item_id])
        row = result.one()
        return ContentItem.from_row(row) if row else None

    async def list_space(self, space: ItemSpace) -> list[ContentItem]:
        """All items of a space, newest id first."""
        rows = await self.session.aexecute(self._list_items, [space.value])
        return [ContentItem.from_row(row) for row in rows]

    async def update_content(self, item: ContentItem) -> bool:
        result = await self.session.aexecute(
            self._update_content,
            [
                item.kind.value,
                item.title,
                item.body,
                item.has_media,
                item.updated_at,
                item.space.value,
                item.item_id,
            ],
        )
        return result.was_applied

    async def set_hidden(
        self, space: ItemSpace, item_id: int, hidden: bool, updated_at: datetime
    ) -> bool:
        result = await self.session.aexecute(
            self._set_hidden, [hidden, updated_at, space.value, item_id]
        )
        return result.was_applied

    async def set_pinned(
        self, space: ItemSpace, item_id: int, pinned: bool, updated_at: datetime
    ) -> bool:
        result = await self.session.aexecute(
            self._set_pinned, [pinned, updated_at, space.value, item_id]
        )
        return result.was_applied

    async def delete(self, space: ItemSpace, item_id: int) -> None:
        await self.session.aexecute(self._delete_item, [space.value, item_id])
        await self.session.aexecute(self._delete_views, [space.value, item_id])

    async def increment_view(self, space: ItemSpace, item_id: int) -> None:
        await self.session.aexecute(self._incr_views, [space.value, item_id])

    async def get_view_count(self, space: ItemSpace, item_id: int) -> int:
        result = await self.session.aexecute(self._get_views, [space.value, item_id])
        row = result.one()
        return row.view_count if row and row.view_count else 0
