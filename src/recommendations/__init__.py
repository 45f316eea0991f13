"""Recommendation ("like") toggles on content items."""

from .models import RECOMMENDATION_TABLES_CQL, Recommendation, ToggleResult
from .service import RecommendationService


__all__ = [
    "RECOMMENDATION_TABLES_CQL",
    "Recommendation",
    "RecommendationService",
    "ToggleResult",
]
