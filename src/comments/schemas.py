"""Pydantic schemas for comments."""

from datetime import datetime

from pydantic import Field, field_validator

from src.core.schemas import CamelModel

from .models import Comment, CommentNode


class CreateCommentRequest(CamelModel):
    """Request to create a comment or a reply."""

    content: str = Field(..., max_length=10000)
    parent_id: int | None = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return v.strip()


class UpdateCommentRequest(CamelModel):
    """Request to update a comment."""

    content: str = Field(..., max_length=10000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return v.strip()


class CommentAuthor(CamelModel):
    id: int
    nickname: str


class CommentResponse(CamelModel):
    """Single comment. Deleted comments carry the placeholder content."""

    id: int
    item_id: int
    parent_id: int | None = None
    author: CommentAuthor
    content: str
    edited: bool = False
    deleted: bool = False
    can_edit: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment, can_edit: bool = False) -> "CommentResponse":
        """Create response from Comment entity."""
        return cls(
            id=comment.comment_id,
            item_id=comment.item_id,
            parent_id=comment.parent_id,
            author=CommentAuthor(id=comment.author_id, nickname=comment.author_nickname),
            content=comment.content,
            edited=comment.is_edited,
            deleted=comment.is_deleted,
            can_edit=can_edit and not comment.is_deleted,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class CommentTreeResponse(CommentResponse):
    """Top-level comment with nested replies."""

    children: list[CommentResponse] = Field(default_factory=list)


class CommentListResponse(CamelModel):
    """Comment tree of an item."""

    comments: list[CommentTreeResponse]
    total: int

    @classmethod
    def from_nodes(cls, nodes: list[CommentNode], can_edit) -> "CommentListResponse":
        """Build the tree response; ``can_edit`` decides per comment."""
        comments = []
        visible = 0
        for node in nodes:
            children = [
                CommentResponse.from_comment(child, can_edit(child))
                for child in node.children
            ]
            top = CommentResponse.from_comment(node.comment, can_edit(node.comment))
            comments.append(CommentTreeResponse(**top.model_dump(), children=children))
            visible += int(not node.comment.is_deleted)
            visible += sum(1 for child in node.children if not child.is_deleted)
        return cls(comments=comments, total=visible)
