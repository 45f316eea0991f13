"""Pydantic schemas for item listings."""

from src.content.schemas import ItemSummaryResponse
from src.core.schemas import CamelModel

from .service import ListingPage


class ListingResponse(CamelModel):
    """Page of notices and regular items (pages are 0-based)."""

    notices: list[ItemSummaryResponse]
    contents: list[ItemSummaryResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int
    last: bool

    @classmethod
    def from_page(cls, page: ListingPage) -> "ListingResponse":
        return cls(
            notices=[ItemSummaryResponse.from_view(v) for v in page.notices],
            contents=[ItemSummaryResponse.from_view(v) for v in page.contents],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            last=page.last,
        )
