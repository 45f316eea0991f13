"""Comment module.

Provides one-level threaded comments on content items with:
- Replies to top-level comments only
- Soft delete with a fixed placeholder
- Per-user rate limiting

Note: Router is not exported here to avoid circular imports.
Import directly from src.comments.router when needed.
"""

from .models import (
    COMMENTS_TABLES_CQL,
    DELETED_PLACEHOLDER,
    Comment,
    CommentNode,
    CommentSort,
)
from .service import CommentService


__all__ = [
    "COMMENTS_TABLES_CQL",
    "DELETED_PLACEHOLDER",
    "Comment",
    "CommentNode",
    "CommentService",
    "CommentSort",
]
