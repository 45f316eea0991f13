"""Shared Pydantic bases for the HTTP layer."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes camelCase and accepts both camelCase and snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Simple message response."""

    message: str
    success: bool = True


class PageMeta(CamelModel):
    """Pagination metadata (pages are 0-based)."""

    page: int = Field(ge=0)
    size: int = Field(ge=1)
    total_elements: int = 0
    total_pages: int = 0
    last: bool = True


def page_count(total: int, size: int) -> int:
    """Number of pages needed for ``total`` elements.

    >>> page_count(0, 10), page_count(10, 10), page_count(11, 10)
    (0, 1, 2)
    """
    return (total + size - 1) // size if size > 0 else 0
