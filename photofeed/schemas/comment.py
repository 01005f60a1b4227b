"""
Comment Pydantic schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from photofeed.schemas.common import CamelModel, strip_text


class CommentCreate(BaseModel):
    """Schema for creating comment"""
    content: str = Field(..., min_length=1, max_length=500)

    @field_validator("content", mode="before")
    @classmethod
    def trim_content(cls, v):
        return strip_text(v)


class CommentItem(CamelModel):
    """Comment with its author's display info"""
    id: UUID
    content: str
    created_at: datetime
    user_id: UUID
    user_name: Optional[str] = None
    user_profile_pic: Optional[str] = None
