"""
Post model - SQLAlchemy ORM
"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from photofeed.core.database import Base, utcnow


class Post(Base):
    """Image post with an optional caption"""

    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    description = Column(String(500), nullable=True)
    image = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post")

    def __repr__(self):
        return f"<Post(id={self.id}, user_id={self.user_id})>"
