"""
FastAPI dependencies for the request pipeline

Protected endpoints resolve, in order: authenticate -> parse body / store
upload -> validate -> the endpoint itself. Any stage may raise an ApiError,
which stops the chain.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from photofeed.core.config import Settings, settings as default_settings
from photofeed.core.database import get_db
from photofeed.core.exceptions import BadRequest, Unauthorized
from photofeed.core.security import decode_token
from photofeed.models.user import User
from photofeed.services.auth_service import AuthService
from photofeed.services.upload_service import UploadPolicy, store_image

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


def parse_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header

    Raises:
        Unauthorized: header missing or not in bearer form
    """
    if not authorization:
        raise Unauthorized("Authorization header is required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized("Invalid authorization format. Use: Bearer <token>")

    return parts[1]


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> User:
    """
    Dependency to get current authenticated user from the bearer token

    The account is re-read on every request so a deleted user's token stops
    working immediately.
    """
    token = parse_bearer_token(request.headers.get("Authorization"))
    claims = decode_token(token, settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return AuthService.get_active_user(db, claims)


async def read_body(request: Request) -> Dict[str, Any]:
    """
    Request body as a flat dict, from JSON or form data

    Multipart file parts come back as ``UploadFile`` values. An empty body is
    an empty dict; a JSON body that is not an object is rejected.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        return dict(form.items())

    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        data = json.loads(raw)
    except ValueError:
        raise BadRequest("Malformed JSON body")

    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def uploaded_file(value: Any) -> Optional[UploadFile]:
    """Return ``value`` if it is a real file part (browsers send empty ones)"""
    if isinstance(value, UploadFile) and value.filename:
        return value
    return None


def form_value(body: Dict[str, Any], key: str) -> Any:
    """Plain field from the body; file parts are handled by the upload stage"""
    value = body.get(key)
    if isinstance(value, UploadFile):
        return None
    return value


def image_upload(kind: str):
    """
    Build the upload stage for ``kind`` ("posts" or "profiles")

    The stage stores the file named by the policy's field, if one was sent,
    and yields its public path (or None).
    """

    async def store_uploaded_image(
        body: Dict[str, Any] = Depends(read_body),
        settings: Settings = Depends(get_settings)
    ) -> Optional[str]:
        policy = UploadPolicy.for_kind(kind, settings)
        upload = uploaded_file(body.get(policy.field))
        if upload is None:
            return None
        return await store_image(upload, policy, settings.UPLOAD_DIR)

    return store_uploaded_image


post_image_upload = image_upload("posts")
profile_image_upload = image_upload("profiles")
