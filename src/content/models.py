"""Database models for content items (board and blog posts).

Cassandra table definitions for:
- Content items: one partition per item space, newest id first
- View counters: counter table, separate because counters cannot share a
  table with regular columns
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ItemSpace(str, Enum):
    """Independent item spaces; ids and listings never cross them."""

    BOARD = "board"
    BLOG = "blog"


class ItemKind(str, Enum):
    """Listing bucket of an item."""

    NOTICE = "NOTICE"
    REVIEW = "REVIEW"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

CONTENT_ITEMS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.content_items (
    space TEXT,
    item_id BIGINT,
    kind TEXT,
    title TEXT,
    body TEXT,
    author_id BIGINT,
    author_nickname TEXT,
    hidden BOOLEAN,
    pinned BOOLEAN,
    has_media BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((space), item_id)
) WITH CLUSTERING ORDER BY (item_id DESC)
"""

CONTENT_ITEM_VIEWS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.content_item_views (
    space TEXT,
    item_id BIGINT,
    view_count COUNTER,
    PRIMARY KEY ((space, item_id))
)
"""

CONTENT_TABLES_CQL = [
    CONTENT_ITEMS_TABLE_CQL,
    CONTENT_ITEM_VIEWS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class ContentItem:
    """A board or blog post."""

    item_id: int
    space: ItemSpace
    kind: ItemKind
    title: str
    body: str
    author_id: int
    author_nickname: str
    hidden: bool
    pinned: bool
    has_media: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "ContentItem":
        """Create ContentItem from Cassandra row."""
        return cls(
            item_id=row.item_id,
            space=ItemSpace(row.space),
            kind=ItemKind(row.kind),
            title=row.title,
            body=row.body or "",
            author_id=row.author_id,
            author_nickname=row.author_nickname or f"user{row.author_id}",
            hidden=row.hidden or False,
            pinned=row.pinned or False,
            has_media=row.has_media or False,
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at,
        )


def create_content_item(
    item_id: int,
    space: ItemSpace,
    kind: ItemKind,
    title: str,
    body: str,
    author_id: int,
    author_nickname: str,
    has_media: bool = False,
) -> ContentItem:
    """Create a new, visible, unpinned item."""
    now = datetime.now(UTC)
    return ContentItem(
        item_id=item_id,
        space=space,
        kind=kind,
        title=title,
        body=body,
        author_id=author_id,
        author_nickname=author_nickname,
        hidden=False,
        pinned=False,
        has_media=has_media,
        created_at=now,
        updated_at=now,
    )
