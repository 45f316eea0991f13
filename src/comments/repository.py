"""Cassandra persistence for comments."""

from datetime import datetime
from typing import TYPE_CHECKING

from src.content.models import ItemSpace

from .models import Comment


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CommentRepository:
    """Prepared statements and row mapping for ``comments``.

    Every comment is dual-written to the item partition and to the id lookup
    table.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (space, item_id, comment_id, parent_id, author_id, author_nickname,
             content, is_edited, is_deleted, deleted_at, deleted_by,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_lookup = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_id (space, comment_id, item_id)
            VALUES (?, ?, ?)
        """)

        self._get_lookup = self.session.prepare(f"""
            SELECT item_id FROM {self.keyspace}.comments_by_id
            WHERE space = ? AND comment_id = ?
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE space = ? AND item_id = ? AND comment_id = ?
        """)

        self._list_for_item = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE space = ? AND item_id = ?
        """)

        self._update_content = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, is_edited = true, updated_at = ?
            WHERE space = ? AND item_id = ? AND comment_id = ?
            IF is_deleted = false
        """)

        self._soft_delete = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, is_deleted = true, deleted_at = ?, deleted_by = ?,
                updated_at = ?
            WHERE space = ? AND item_id = ? AND comment_id = ?
            IF is_deleted = false
        """)

        self._delete_for_item = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments
            WHERE space = ? AND item_id = ?
        """)

        self._delete_lookup = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_id
            WHERE space = ? AND comment_id = ?
        """)

    async def insert(self, comment: Comment) -> None:
        await self.session.aexecute(
            self._insert_comment,
            [
                comment.space.value,
                comment.item_id,
                comment.comment_id,
                comment.parent_id,
                comment.author_id,
                comment.author_nickname,
                comment.content,
                comment.is_edited,
                comment.is_deleted,
                comment.deleted_at,
                comment.deleted_by,
                comment.created_at,
                comment.updated_at,
            ],
        )
        await self.session.aexecute(
            self._insert_lookup,
            [comment.space.value, comment.comment_id, comment.item_id],
        )

    async def get(self, space: ItemSpace, comment_id: int) -> Comment | None:
        result = await self.session.aexecute(
            self._get_lookup, [space.value, comment_id]
        )
        lookup = result.one()
        if not lookup:
            return None

        result = await self.session.aexecute(
            self._get_comment, [space.value, lookup.item_id, comment_id]
        )
        row = result.one()
        return Comment.from_row(row) if row else None

    async def list_for_item(self, space: ItemSpace, item_id: int) -> list[Comment]:
        """All comments of an item (deleted included), oldest id first."""
        rows = await self.session.aexecute(self._list_for_item, [space.value, item_id])
        return [Comment.from_row(row) for row in rows]

    async def update_content(
        self, comment: Comment, content: str, updated_at: datetime
    ) -> bool:
        """Replace the content unless the comment was deleted meanwhile."""
        result = await self.session.aexecute(
            self._update_content,
            [
                content,
                updated_at,
                comment.space.value,
                comment.item_id,
                comment.comment_id,
            ],
        )
        return result.was_applied

    async def mark_deleted(
        self,
        comment: Comment,
        placeholder: str,
        deleted_by: int,
        deleted_at: datetime,
    ) -> bool:
        """Soft delete. Returns False if another request deleted it first."""
        result = await self.session.aexecute(
            self._soft_delete,
            [
                placeholder,
                deleted_at,
                deleted_by,
                deleted_at,
                comment.space.value,
                comment.item_id,
                comment.comment_id,
            ],
        )
        return result.was_applied

    async def delete_for_item(self, space: ItemSpace, item_id: int) -> int:
        """Physically remove every comment of an item. Returns the row count."""
        comments = await self.list_for_item(space, item_id)
        for comment in comments:
            await self.session.aexecute(
                self._delete_lookup, [space.value, comment.comment_id]
            )
        await self.session.aexecute(self._delete_for_item, [space.value, item_id])
        return len(comments)
