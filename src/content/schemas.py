"""Pydantic schemas for content items."""

from datetime import datetime

from pydantic import Field

from src.core.schemas import CamelModel
from src.listing.service import ItemView

from .models import ItemKind, ItemSpace


class CreateItemRequest(CamelModel):
    """Request to create an item."""

    title: str = Field(..., max_length=200)
    body: str = Field(..., alias="content")
    type: ItemKind = ItemKind.REVIEW


class UpdateItemRequest(CamelModel):
    """Request to update an item (type is optional)."""

    title: str = Field(..., max_length=200)
    body: str = Field(..., alias="content")
    type: ItemKind | None = None


class ItemAuthor(CamelModel):
    id: int
    nickname: str


class ItemSummaryResponse(CamelModel):
    """List entry of an item with its derived counts."""

    id: int
    space: ItemSpace
    type: ItemKind
    title: str
    author: ItemAuthor
    hidden: bool = False
    pinned: bool = False
    has_media: bool = False
    view_count: int = 0
    recommend_count: int = 0
    comment_count: int = 0
    report_count: int = 0
    total_report_count: int = 0
    recommended: bool = False
    can_edit: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: ItemView) -> "ItemSummaryResponse":
        return cls(**_view_fields(view))


class ItemDetailResponse(ItemSummaryResponse):
    """Full item including its body."""

    content: str

    @classmethod
    def from_view(cls, view: ItemView) -> "ItemDetailResponse":
        return cls(**_view_fields(view), content=view.item.body)


def _view_fields(view: ItemView) -> dict:
    item = view.item
    return {
        "id": item.item_id,
        "space": item.space,
        "type": item.kind,
        "title": item.title,
        "author": ItemAuthor(id=item.author_id, nickname=item.author_nickname),
        "hidden": item.hidden,
        "pinned": item.pinned,
        "has_media": item.has_media,
        "view_count": view.view_count,
        "recommend_count": view.recommend_count,
        "comment_count": view.comment_count,
        "report_count": view.report_count,
        "total_report_count": view.total_report_count,
        "recommended": view.recommended,
        "can_edit": view.can_edit,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }
