"""
Posts API endpoints
Feed, post writes, likes and comments
"""
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import uuid

from photofeed.core.config import settings
from photofeed.core.database import get_db
from photofeed.core.dependencies import (
    form_value,
    get_current_user,
    get_settings,
    post_image_upload,
    read_body,
)
from photofeed.core.validation import validate_input
from photofeed.models.user import User
from photofeed.schemas.comment import CommentCreate
from photofeed.services.comment_service import CommentService
from photofeed.services.like_service import LikeService
from photofeed.services.post_service import POST_INPUT_MODELS, PostOperation, PostService
from photofeed.utils.responses import paginated_response, success_response

router = APIRouter()


def validate_post_input(operation: PostOperation):
    """Validation stage for a post write, run after the upload stage"""
    model = POST_INPUT_MODELS[operation]

    def validate(
        body: Dict[str, Any] = Depends(read_body),
        image_file: Optional[str] = Depends(post_image_upload)
    ):
        return validate_input(model, {
            "file": image_file,
            "image": form_value(body, "image"),
            "description": form_value(body, "description"),
        })

    return validate


def validate_comment_input(body: Dict[str, Any] = Depends(read_body)) -> CommentCreate:
    return validate_input(CommentCreate, {"content": form_value(body, "content")})


@router.get("", response_model=dict)
def list_posts(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    app_settings=Depends(get_settings)
):
    """
    Paginated feed, newest first

    - **page**: Page number (1-indexed)
    - **limit**: Posts per page
    - **search**: Case-insensitive substring of the description
    """
    limit = limit or app_settings.DEFAULT_PAGE_SIZE
    items, total = PostService.get_feed(db, current_user.id, page=page, limit=limit, search=search)

    return paginated_response(
        [item.to_json() for item in items],
        page,
        limit,
        total,
        total_key="totalPosts",
        message="Posts fetched successfully"
    )


@router.post("/create", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_post(
    current_user: User = Depends(get_current_user),
    payload=Depends(validate_post_input(PostOperation.CREATE)),
    db: Session = Depends(get_db)
):
    """
    Create a post

    - **image**: Image file (JPEG, PNG or WEBP, up to 5MB) or an image path
    - **description**: Optional caption (max 500 characters)
    """
    result = PostService.create_post(db, current_user, payload)
    return success_response(
        data=result.to_json(),
        message="Post created successfully",
        status_code=status.HTTP_201_CREATED
    )


@router.delete("/comments/{commentId}", response_model=dict)
def delete_comment(
    comment_id: uuid.UUID = Path(..., alias="commentId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete one of your own comments"""
    data = CommentService.delete_comment(db, current_user, comment_id)
    return success_response(data=data, message="Comment deleted")


@router.get("/{postId}", response_model=dict)
def get_post(
    post_id: uuid.UUID = Path(..., alias="postId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Single visible post with like/comment counts"""
    item = PostService.get_post(db, current_user.id, post_id)
    return success_response(data=item.to_json(), message="Post fetched successfully")


@router.patch("/{postId}", response_model=dict)
def edit_post(
    post_id: uuid.UUID = Path(..., alias="postId"),
    current_user: User = Depends(get_current_user),
    payload=Depends(validate_post_input(PostOperation.EDIT)),
    db: Session = Depends(get_db)
):
    """
    Edit one of your own posts

    Send a new image (file or path), a new description, or both.
    """
    result = PostService.edit_post(db, current_user, post_id, payload)
    return success_response(data=result.to_json(), message="Post updated successfully")


@router.delete("/{postId}", response_model=dict)
def delete_post(
    post_id: uuid.UUID = Path(..., alias="postId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete one of your own posts"""
    data = PostService.delete_post(db, current_user, post_id)
    return success_response(data=data, message="Post deleted successfully")


@router.post("/{postId}/like", response_model=dict)
def toggle_like(
    post_id: uuid.UUID = Path(..., alias="postId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Like the post, or remove your like if it is already there"""
    result = LikeService.toggle_like(db, current_user, post_id)
    return success_response(
        data=result.to_json(),
        message="Post liked" if result.liked else "Post unliked"
    )


@router.post("/{postId}/comments", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: uuid.UUID = Path(..., alias="postId"),
    current_user: User = Depends(get_current_user),
    payload: CommentCreate = Depends(validate_comment_input),
    db: Session = Depends(get_db)
):
    """
    Add a comment

    - **content**: Comment text (1-500 characters)
    """
    comment = CommentService.create_comment(db, current_user, post_id, payload)
    return success_response(
        data=comment.to_json(),
        message="Comment added",
        status_code=status.HTTP_201_CREATED
    )


@router.get("/{postId}/comments", response_model=dict)
def list_comments(
    post_id: uuid.UUID = Path(..., alias="postId"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    app_settings=Depends(get_settings)
):
    """Comments on a post, newest first"""
    limit = limit or app_settings.COMMENTS_PAGE_SIZE
    items, total = CommentService.list_comments(db, post_id, page=page, limit=limit)

    return paginated_response(
        [item.to_json() for item in items],
        page,
        limit,
        total,
        total_key="totalComments",
        message="Comments fetched"
    )
