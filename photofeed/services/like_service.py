"""
Like Service
Toggle a user's like on a post
"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging
import uuid

from photofeed.core.database import require_db
from photofeed.core.exceptions import Conflict
from photofeed.models.like import Like
from photofeed.models.user import User
from photofeed.schemas.post import LikeToggleResult
from photofeed.services.post_service import PostService

logger = logging.getLogger(__name__)

MAX_TOGGLE_ATTEMPTS = 3


def count_likes(db: Session, post_id: uuid.UUID) -> int:
    """Likes on a post by accounts that are still active"""
    return (
        db.query(func.count(Like.user_id))
        .join(User, Like.user_id == User.id)
        .filter(Like.post_id == post_id, User.is_deleted.is_(False))
        .scalar()
    )


class LikeService:
    """Service for like operations"""

    @staticmethod
    def _toggle_once(db: Session, user_id: uuid.UUID, post_id: uuid.UUID) -> bool:
        removed = (
            db.query(Like)
            .filter(Like.user_id == user_id, Like.post_id == post_id)
            .delete(synchronize_session=False)
        )
        if removed:
            db.commit()
            return False

        db.add(Like(user_id=user_id, post_id=post_id))
        db.commit()
        return True

    @staticmethod
    def toggle_like(db: Session, user: User, post_id: uuid.UUID) -> LikeToggleResult:
        """
        Like the post if the user has not, otherwise remove the like

        Two overlapping toggles by the same user can collide on the
        (user, post) key; the loser rolls back and re-reads. Only running out
        of attempts surfaces as Conflict.

        Returns:
            LikeToggleResult with the new state and the recounted total

        Raises:
            NotFound: post missing, deleted, or its owner is deleted
            Conflict: still colliding after MAX_TOGGLE_ATTEMPTS
        """
        db = require_db(db)

        PostService.get_visible_post(db, post_id)

        for attempt in range(1, MAX_TOGGLE_ATTEMPTS + 1):
            try:
                liked = LikeService._toggle_once(db, user.id, post_id)
                break
            except IntegrityError:
                db.rollback()
                logger.info(
                    "Like toggle collided, retrying",
                    extra={"post_id": str(post_id), "attempt": attempt}
                )
        else:
            raise Conflict("Like is being updated by another request, please retry")

        return LikeToggleResult(liked=liked, like_count=count_likes(db, post_id))
