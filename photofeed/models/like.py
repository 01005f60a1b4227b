"""
Like model for post likes
"""
from sqlalchemy import Column, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship

from photofeed.core.database import Base, utcnow


class Like(Base):
    """A user's like on a post. Present means liked; there is no soft delete."""
    __tablename__ = "likes"

    # Composite primary key - user can only like a post once
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    post = relationship("Post", lazy="select")
    user = relationship("User", lazy="select")

    def __repr__(self):
        return f"<Like(user_id={self.user_id}, post_id={self.post_id})>"
