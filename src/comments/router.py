"""Comment API endpoints.

Provides routes for:
- Comment and reply creation on an item
- Comment tree listing
- Comment edit and soft delete
"""

import structlog
from fastapi import APIRouter, Query, status

from src.auth.dependencies import CurrentUser, OptionalUser
from src.auth.permissions import can_modify
from src.content.models import ItemSpace

from .dependencies import CommentServiceDep
from .models import CommentSort
from .schemas import (
    CommentListResponse,
    CommentResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/{space}", tags=["comments"])


@router.post(
    "/items/{item_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    space: ItemSpace,
    item_id: int,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Create a comment on an item, or a reply when ``parentId`` is set.

    Replies to replies are rejected with ``invalid_nesting``.
    """
    comment = await comment_service.add_comment(
        space=space,
        item_id=item_id,
        principal=user,
        content=data.content,
        parent_id=data.parent_id,
    )
    return CommentResponse.from_comment(comment, can_edit=True)


@router.get(
    "/items/{item_id}/comments",
    response_model=CommentListResponse,
    summary="List item comments",
)
async def list_comments(
    space: ItemSpace,
    item_id: int,
    comment_service: CommentServiceDep,
    user: OptionalUser,
    sort: CommentSort = Query(default=CommentSort.CREATED),
) -> CommentListResponse:
    """Get the comment tree of an item."""
    nodes = await comment_service.list_comments(space, item_id, sort, principal=user)
    return CommentListResponse.from_nodes(
        nodes, lambda comment: can_modify(user, comment)
    )


@router.put(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Update comment",
)
async def update_comment(
    space: ItemSpace,
    comment_id: int,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Update a comment's content (author or admin)."""
    comment = await comment_service.edit_comment(
        space=space,
        comment_id=comment_id,
        principal=user,
        content=data.content,
    )
    return CommentResponse.from_comment(comment, can_edit=True)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete comment",
)
async def delete_comment(
    space: ItemSpace,
    comment_id: int,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> None:
    """Soft delete a comment (author or admin). Repeating it succeeds."""
    await comment_service.delete_comment(
        space=space, comment_id=comment_id, principal=user
    )
