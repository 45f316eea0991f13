"""Content item module.

Board and blog posts with admin-controlled hidden and pinned flags.

Note: Router is not exported here to avoid circular imports.
Import directly from src.content.router when needed.
"""

from .models import CONTENT_TABLES_CQL, ContentItem, ItemKind, ItemSpace
from .service import ContentItemService


__all__ = [
    "CONTENT_TABLES_CQL",
    "ContentItem",
    "ContentItemService",
    "ItemKind",
    "ItemSpace",
]
