"""Database models for item recommendations.

One row per (item, user); the primary key is the uniqueness constraint, and
lightweight transactions make inserts and deletes race-safe.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.content.models import ItemSpace


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

RECOMMENDATIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.recommendations (
    space TEXT,
    item_id BIGINT,
    user_id BIGINT,
    created_at TIMESTAMP,
    PRIMARY KEY ((space, item_id), user_id)
)
"""

RECOMMENDATION_TABLES_CQL = [RECOMMENDATIONS_TABLE_CQL]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Recommendation:
    """A user's active recommendation of an item."""

    space: ItemSpace
    item_id: int
    user_id: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "Recommendation":
        """Create Recommendation from Cassandra row."""
        return cls(
            space=ItemSpace(row.space),
            item_id=row.item_id,
            user_id=row.user_id,
            created_at=row.created_at,
        )


@dataclass
class ToggleResult:
    """Post-state of a toggle."""

    recommended: bool
    recommend_count: int


def create_recommendation(space: ItemSpace, item_id: int, user_id: int) -> Recommendation:
    return Recommendation(
        space=space,
        item_id=item_id,
        user_id=user_id,
        created_at=datetime.now(UTC),
    )
