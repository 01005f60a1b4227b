"""
Image upload storage
Validates uploaded images and writes them under the upload directory
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List
import logging
import os
import time
import uuid

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from photofeed.core.config import Settings
from photofeed.core.exceptions import validation_failed

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
MEGABYTE = 1024 * 1024

# Extensions a stored file may keep, by content type; the first is the fallback
EXTENSIONS = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/webp": (".webp",),
}


@dataclass(frozen=True)
class UploadPolicy:
    """Where an upload kind is read from, stored, and how large it may be"""
    kind: str
    field: str
    max_bytes: int
    too_large_message: str
    allowed_types: List[str]

    @classmethod
    def for_kind(cls, kind: str, settings: Settings) -> "UploadPolicy":
        if kind == "posts":
            return cls(
                kind="posts",
                field="image",
                max_bytes=settings.POST_IMAGE_MAX_BYTES,
                too_large_message=f"Image must be at most {human_size(settings.POST_IMAGE_MAX_BYTES)}",
                allowed_types=settings.allowed_image_types_list,
            )
        if kind == "profiles":
            return cls(
                kind="profiles",
                field="profilePic",
                max_bytes=settings.PROFILE_IMAGE_MAX_BYTES,
                too_large_message=f"Profile picture must be at most {human_size(settings.PROFILE_IMAGE_MAX_BYTES)}",
                allowed_types=settings.allowed_image_types_list,
            )
        raise ValueError(f"Unknown upload kind: {kind}")


def human_size(size: int) -> str:
    if size % MEGABYTE == 0:
        return f"{size // MEGABYTE}MB"
    if size % 1024 == 0:
        return f"{size // 1024}KB"
    return f"{size} bytes"


def _reject(policy: UploadPolicy, message: str):
    logger.warning("Rejected %s upload on field %s: %s", policy.kind, policy.field, message)
    return validation_failed([{"field": policy.field, "message": message}])


async def read_limited(upload: UploadFile, policy: UploadPolicy) -> bytes:
    """Read the upload in chunks, failing as soon as it passes the size limit"""
    chunks = []
    size = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > policy.max_bytes:
            raise _reject(policy, policy.too_large_message)
        chunks.append(chunk)
    return b"".join(chunks)


def build_filename(upload: UploadFile) -> str:
    _, ext = os.path.splitext(upload.filename or "")
    allowed = EXTENSIONS.get((upload.content_type or "").lower(), ())
    ext = ext.lower()
    if ext not in allowed:
        ext = allowed[0] if allowed else ""
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}{ext}"


def _write_file(path: Path, content: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


async def store_image(upload: UploadFile, policy: UploadPolicy, upload_dir: str) -> str:
    """
    Validate and store an uploaded image

    Args:
        upload: Multipart file part
        policy: Field name, size limit and target folder
        upload_dir: Root directory served under ``/uploads``

    Returns:
        Public path, e.g. ``/uploads/posts/1700000000000-<uuid>.jpg``

    Raises:
        BadRequest: wrong MIME type or file too large
    """
    if (upload.content_type or "").lower() not in policy.allowed_types:
        raise _reject(policy, "Only JPEG, PNG, and WEBP images are allowed")

    content = await read_limited(upload, policy)

    filename = build_filename(upload)
    destination = Path(upload_dir) / policy.kind / filename
    await run_in_threadpool(_write_file, destination, content)

    logger.info("Stored %s upload %s (%d bytes)", policy.kind, filename, len(content))
    return f"/uploads/{policy.kind}/{filename}"
