"""
Post Service
Feed queries, single post lookup and owner-only post writes
"""
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type
import logging
import uuid

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session, Query, aliased

from photofeed.core.database import require_db, utcnow
from photofeed.core.exceptions import NotFound
from photofeed.models.comment import Comment
from photofeed.models.like import Like
from photofeed.models.post import Post
from photofeed.models.user import User
from photofeed.schemas.post import PostCreate, PostEdit, PostItem, PostWriteResult
from photofeed.utils.pagination import paginate

logger = logging.getLogger(__name__)


class PostOperation(str, Enum):
    CREATE = "create"
    EDIT = "edit"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ============ Query building blocks ============

def like_count_column():
    """Likes on the outer post, ignoring likes from deleted accounts"""
    liker = aliased(User)
    return (
        select(func.count())
        .select_from(Like)
        .join(liker, Like.user_id == liker.id)
        .where(Like.post_id == Post.id, liker.is_deleted.is_(False))
        .correlate(Post)
        .scalar_subquery()
    )


def comment_count_column():
    """Live comments on the outer post by live accounts"""
    commenter = aliased(User)
    return (
        select(func.count())
        .select_from(Comment)
        .join(commenter, Comment.user_id == commenter.id)
        .where(
            Comment.post_id == Post.id,
            Comment.is_deleted.is_(False),
            commenter.is_deleted.is_(False),
        )
        .correlate(Post)
        .scalar_subquery()
    )


def liked_by_column(viewer_id: uuid.UUID):
    return (
        select(Like.user_id)
        .where(Like.post_id == Post.id, Like.user_id == viewer_id)
        .correlate(Post)
        .exists()
    )


def visible_posts(db: Session) -> Query:
    """Posts that are not deleted and whose owner is not deleted"""
    return (
        db.query(Post)
        .join(User, Post.user_id == User.id)
        .filter(Post.is_deleted.is_(False), User.is_deleted.is_(False))
    )


def feed_query(db: Session, viewer_id: uuid.UUID, search: Optional[str] = None) -> Query:
    query = (
        db.query(
            Post.id.label("id"),
            Post.user_id.label("user_id"),
            Post.description.label("description"),
            Post.image.label("image"),
            User.name.label("user_name"),
            User.profile_pic.label("user_profile_pic"),
            Post.created_at.label("created_at"),
            like_count_column().label("like_count"),
            comment_count_column().label("comment_count"),
            liked_by_column(viewer_id).label("liked_by_me"),
        )
        .join(User, Post.user_id == User.id)
        .filter(Post.is_deleted.is_(False), User.is_deleted.is_(False))
    )

    term = (search or "").strip()
    if term:
        query = query.filter(Post.description.ilike(f"%{escape_like(term)}%", escape="\\"))

    return query


class PostService:
    """Service for post operations"""

    @staticmethod
    def get_feed(
        db: Session,
        viewer_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None
    ) -> Tuple[List[PostItem], int]:
        """
        Page of the feed, newest first

        Returns:
            Tuple of (items, total matching posts)
        """
        db = require_db(db)

        query = feed_query(db, viewer_id, search).order_by(Post.created_at.desc(), Post.id.desc())
        rows, total = paginate(query, page, limit)

        return [PostItem.model_validate(row) for row in rows], total

    @staticmethod
    def get_post(db: Session, viewer_id: uuid.UUID, post_id: uuid.UUID) -> PostItem:
        db = require_db(db)

        row = feed_query(db, viewer_id).filter(Post.id == post_id).first()
        if row is None:
            raise NotFound("Post not found")

        return PostItem.model_validate(row)

    @staticmethod
    def get_visible_post(db: Session, post_id: uuid.UUID) -> Post:
        """Visible post by id, or NotFound"""
        db = require_db(db)

        post = visible_posts(db).filter(Post.id == post_id).first()
        if post is None:
            raise NotFound("Post not found")
        return post

    @staticmethod
    def get_own_post(db: Session, user: User, post_id: uuid.UUID) -> Post:
        """Live post owned by ``user``; someone else's post is reported as missing"""
        db = require_db(db)

        post = db.query(Post).filter(
            Post.id == post_id,
            Post.user_id == user.id,
            Post.is_deleted.is_(False)
        ).first()
        if post is None:
            raise NotFound("Post not found or you don't have permission")
        return post

    @staticmethod
    def create_post(db: Session, user: User, payload: PostCreate) -> PostWriteResult:
        db = require_db(db)

        post = Post(
            user_id=user.id,
            description=payload.description,
            image=payload.image_path,
        )
        db.add(post)
        db.commit()
        db.refresh(post)

        logger.info("Post created", extra={"user_id": str(user.id), "post_id": str(post.id)})
        return PostWriteResult.model_validate(post)

    @staticmethod
    def edit_post(db: Session, user: User, post_id: uuid.UUID, payload: PostEdit) -> PostWriteResult:
        """Update the fields that were supplied, leaving the rest as they are"""
        db = require_db(db)

        post = PostService.get_own_post(db, user, post_id)

        if payload.image_path is not None:
            post.image = payload.image_path
        if payload.description is not None:
            post.description = payload.description

        db.commit()
        db.refresh(post)

        logger.info("Post edited", extra={"user_id": str(user.id), "post_id": str(post.id)})
        return PostWriteResult.model_validate(post)

    @staticmethod
    def delete_post(db: Session, user: User, post_id: uuid.UUID) -> Dict[str, str]:
        """Soft delete; the stored image file is kept"""
        db = require_db(db)

        post = PostService.get_own_post(db, user, post_id)
        post.is_deleted = True
        post.deleted_at = utcnow()
        db.commit()

        logger.info("Post deleted", extra={"user_id": str(user.id), "post_id": str(post.id)})
        return {"postId": str(post.id)}


# Input model for each post write that carries a body
POST_INPUT_MODELS: Dict[PostOperation, Type[BaseModel]] = {
    PostOperation.CREATE: PostCreate,
    PostOperation.EDIT: PostEdit,
}
