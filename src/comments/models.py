"""Database models for item comments.

Cassandra table definitions for:
- Comments: one partition per item, clustered by comment id
- Comment lookup: maps (space, comment_id) to the owning item

Architecture: adjacency list capped at one level
- parent_id references a top-level comment (NULL for top-level comments)
- Soft delete keeps the row so replies stay attached
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.content.models import ItemSpace


DELETED_PLACEHOLDER = "삭제된 댓글입니다."


class CommentSort(str, Enum):
    """Ordering of top-level comments."""

    CREATED = "created"
    LATEST = "latest"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COMMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    space TEXT,
    item_id BIGINT,
    comment_id BIGINT,
    parent_id BIGINT,
    author_id BIGINT,
    author_nickname TEXT,
    content TEXT,
    is_edited BOOLEAN,
    is_deleted BOOLEAN,
    deleted_at TIMESTAMP,
    deleted_by BIGINT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((space, item_id), comment_id)
) WITH CLUSTERING ORDER BY (comment_id ASC)
"""

# O(1) lookup by id, the comment rows themselves live in the item partition
COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    space TEXT,
    comment_id BIGINT,
    item_id BIGINT,
    PRIMARY KEY ((space, comment_id))
)
"""

COMMENTS_TABLES_CQL = [
    COMMENTS_TABLE_CQL,
    COMMENTS_BY_ID_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Comment:
    """Comment entity."""

    comment_id: int
    space: ItemSpace
    item_id: int
    parent_id: int | None
    author_id: int
    author_nickname: str
    content: str
    is_edited: bool
    is_deleted: bool
    deleted_at: datetime | None
    deleted_by: int | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row."""
        return cls(
            comment_id=row.comment_id,
            space=ItemSpace(row.space),
            item_id=row.item_id,
            parent_id=row.parent_id,
            author_id=row.author_id,
            author_nickname=row.author_nickname or f"user{row.author_id}",
            content=row.content or "",
            is_edited=row.is_edited or False,
            is_deleted=row.is_deleted or False,
            deleted_at=row.deleted_at,
            deleted_by=row.deleted_by,
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.comment_id)


@dataclass
class CommentNode:
    """Top-level comment with its ordered replies."""

    comment: Comment
    children: list[Comment] = field(default_factory=list)


def create_comment(
    comment_id: int,
    space: ItemSpace,
    item_id: int,
    author_id: int,
    author_nickname: str,
    content: str,
    parent_id: int | None = None,
) -> Comment:
    """Create a new comment entity."""
    now = datetime.now(UTC)
    return Comment(
        comment_id=comment_id,
        space=space,
        item_id=item_id,
        parent_id=parent_id,
        author_id=author_id,
        author_nickname=author_nickname,
        content=content,
        is_edited=False,
        is_deleted=False,
        deleted_at=None,
        deleted_by=None,
        created_at=now,
        updated_at=now,
    )
