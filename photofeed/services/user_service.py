"""
User Service
Public profiles and account deletion
"""
from sqlalchemy.orm import Session
import logging
import uuid

from photofeed.core.database import require_db, utcnow
from photofeed.core.exceptions import NotFound
from photofeed.models.post import Post
from photofeed.models.user import User
from photofeed.schemas.user import ProfilePost, UserProfile

logger = logging.getLogger(__name__)


class UserService:
    """Service for user profile operations"""

    @staticmethod
    def get_profile(db: Session, user_id: uuid.UUID) -> UserProfile:
        """
        Active user with their live posts, newest first

        Raises:
            NotFound: no such user, or the account is deleted
        """
        db = require_db(db)

        user = db.query(User).filter(User.id == user_id, User.is_deleted.is_(False)).first()
        if user is None:
            raise NotFound("User not found")

        posts = db.query(Post).filter(
            Post.user_id == user.id,
            Post.is_deleted.is_(False)
        ).order_by(Post.created_at.desc(), Post.id.desc()).all()

        return UserProfile(
            id=user.id,
            name=user.name,
            email=user.email,
            profile_pic=user.profile_pic,
            post_count=len(posts),
            posts=[ProfilePost.model_validate(post) for post in posts],
        )

    @staticmethod
    def delete_account(db: Session, user: User) -> int:
        """
        Soft delete the account and all of its live posts in one transaction

        Likes and comments are left in place; they stop counting because their
        author is deleted.

        Returns:
            Number of posts marked deleted
        """
        db = require_db(db)

        now = utcnow()
        try:
            user.is_deleted = True
            user.deleted_at = now
            removed_posts = db.query(Post).filter(
                Post.user_id == user.id,
                Post.is_deleted.is_(False)
            ).update(
                {Post.is_deleted: True, Post.deleted_at: now},
                synchronize_session=False
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Account deleted", extra={"user_id": str(user.id), "posts_deleted": removed_posts})
        return removed_posts
