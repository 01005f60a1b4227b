"""
Comment Service
Comments on visible posts, soft-deletable by their author
"""
from sqlalchemy.orm import Session
from typing import List, Tuple
import logging
import uuid

from photofeed.core.database import require_db, utcnow
from photofeed.core.exceptions import NotFound
from photofeed.models.comment import Comment
from photofeed.models.user import User
from photofeed.schemas.comment import CommentCreate, CommentItem
from photofeed.services.post_service import PostService
from photofeed.utils.pagination import paginate

logger = logging.getLogger(__name__)


class CommentService:
    """Service for comment operations"""

    @staticmethod
    def create_comment(db: Session, user: User, post_id: uuid.UUID, payload: CommentCreate) -> CommentItem:
        db = require_db(db)

        PostService.get_visible_post(db, post_id)

        comment = Comment(post_id=post_id, user_id=user.id, content=payload.content)
        db.add(comment)
        db.commit()
        db.refresh(comment)

        logger.info("Comment added", extra={"post_id": str(post_id), "comment_id": str(comment.id)})
        return CommentItem(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            user_id=user.id,
            user_name=user.name,
            user_profile_pic=user.profile_pic,
        )

    @staticmethod
    def list_comments(
        db: Session,
        post_id: uuid.UUID,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[CommentItem], int]:
        """
        Live comments by live accounts on a visible post, newest first

        Returns:
            Tuple of (items, total comments)
        """
        db = require_db(db)

        PostService.get_visible_post(db, post_id)

        query = db.query(
            Comment.id.label("id"),
            Comment.content.label("content"),
            Comment.created_at.label("created_at"),
            Comment.user_id.label("user_id"),
            User.name.label("user_name"),
            User.profile_pic.label("user_profile_pic"),
        ).join(
            User, Comment.user_id == User.id
        ).filter(
            Comment.post_id == post_id,
            Comment.is_deleted.is_(False),
            User.is_deleted.is_(False)
        ).order_by(Comment.created_at.desc(), Comment.id.desc())

        rows, total = paginate(query, page, limit)
        return [CommentItem.model_validate(row) for row in rows], total

    @staticmethod
    def delete_comment(db: Session, user: User, comment_id: uuid.UUID) -> dict:
        """Soft delete a comment; only its author may do so"""
        db = require_db(db)

        updated = db.query(Comment).filter(
            Comment.id == comment_id,
            Comment.user_id == user.id,
            Comment.is_deleted.is_(False)
        ).update(
            {Comment.is_deleted: True, Comment.deleted_at: utcnow()},
            synchronize_session=False
        )
        if not updated:
            raise NotFound("Comment not found or you don't have permission")

        db.commit()

        logger.info("Comment deleted", extra={"comment_id": str(comment_id)})
        return {"commentId": str(comment_id)}
