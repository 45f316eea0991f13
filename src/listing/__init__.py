"""Public and admin item listings with derived statistics."""

from .service import ItemView, ListingPage, ListingService, SearchType, StatusFilter


__all__ = [
    "ItemView",
    "ListingPage",
    "ListingService",
    "SearchType",
    "StatusFilter",
]
