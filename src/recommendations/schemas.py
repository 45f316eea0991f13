"""Pydantic schemas for recommendations."""

from src.core.schemas import CamelModel

from .models import ToggleResult


class RecommendationResponse(CamelModel):
    """Recommendation state of an item for the caller."""

    recommended: bool
    recommend_count: int

    @classmethod
    def from_result(cls, result: ToggleResult) -> "RecommendationResponse":
        return cls(
            recommended=result.recommended,
            recommend_count=result.recommend_count,
        )
