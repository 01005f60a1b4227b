"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from photofeed.schemas.common import CamelModel, check_email_format, strip_text


# ============ Request Schemas ============

class UserSignup(BaseModel):
    """Schema for user registration"""
    name: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=15)

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return strip_text(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return check_email_format(v)


class UserSignin(BaseModel):
    """Schema for user login"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return check_email_format(v)


# ============ Response Schemas ============

class SignupResult(CamelModel):
    user_id: UUID
    user_name: str
    email: str
    profile_pic: Optional[str] = None


class SigninResult(CamelModel):
    user_id: UUID
    user_name: str
    token: str
    profile_pic: Optional[str] = None


class ProfilePost(CamelModel):
    """Post summary shown on a profile"""
    id: UUID
    description: Optional[str] = None
    image: str
    created_at: datetime


class UserProfile(CamelModel):
    """Public profile with the user's visible posts"""
    id: UUID
    name: str
    email: str
    profile_pic: Optional[str] = None
    post_count: int
    posts: List[ProfilePost]
