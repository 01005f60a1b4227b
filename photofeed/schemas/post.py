"""
Post Pydantic schemas
"""
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from typing import Optional
from datetime import datetime
from uuid import UUID

from photofeed.schemas.common import CamelModel, blank_to_none

IMAGE_PATH_PREFIXES = ("/", "http://", "https://")


def check_image_reference(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.startswith(IMAGE_PATH_PREFIXES):
        raise PydanticCustomError(
            "image_reference",
            "The image must be an uploaded file or an image path.",
        )
    return value


# ============ Request Schemas ============

class PostCreate(BaseModel):
    """
    Schema for creating a post

    ``file`` is the stored path of an uploaded image, ``image`` an explicit
    path reference sent as a plain field. One of the two is required.
    """
    file: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255, validate_default=True)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("image", "description", mode="before")
    @classmethod
    def trim(cls, v):
        return blank_to_none(v)

    @field_validator("image")
    @classmethod
    def require_image(cls, v, info: ValidationInfo):
        if v is None and info.data.get("file") is None:
            raise PydanticCustomError("image_required", "The image field is required.")
        return check_image_reference(v)

    @property
    def image_path(self) -> str:
        return self.file or self.image


class PostEdit(BaseModel):
    """Schema for editing a post: at least one of image or description"""
    file: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500, validate_default=True)

    @field_validator("image", "description", mode="before")
    @classmethod
    def trim(cls, v):
        return blank_to_none(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        return check_image_reference(v)

    @field_validator("description")
    @classmethod
    def require_one_field(cls, v, info: ValidationInfo):
        # An invalid image is reported on its own field
        image_ok = "image" in info.data
        if v is None and image_ok and info.data.get("image") is None and info.data.get("file") is None:
            raise PydanticCustomError("nothing_to_update", "Provide at least one field to update")
        return v

    @property
    def image_path(self) -> Optional[str]:
        return self.file or self.image


# ============ Response Schemas ============

class PostItem(CamelModel):
    """Post as shown in the feed and on the detail page"""
    id: UUID
    user_id: UUID
    description: Optional[str] = None
    image: str
    user_name: Optional[str] = None
    user_profile_pic: Optional[str] = None
    created_at: datetime
    like_count: int = 0
    comment_count: int = 0
    liked_by_me: bool = False


class PostWriteResult(CamelModel):
    id: UUID
    image: str
    description: Optional[str] = None


class LikeToggleResult(CamelModel):
    liked: bool
    like_count: int
