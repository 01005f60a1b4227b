"""
Models package - Import all models here for easy access
"""
from photofeed.models.user import User
from photofeed.models.post import Post
from photofeed.models.like import Like
from photofeed.models.comment import Comment
from photofeed.models.log_entry import LogEntry

__all__ = [
    # User
    "User",

    # Social
    "Post",
    "Like",
    "Comment",

    # Observability
    "LogEntry",
]
