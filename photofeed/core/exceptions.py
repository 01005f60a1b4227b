"""
API error hierarchy

Services and dependencies raise these; the handlers registered in
``photofeed.core.errors`` turn them into the response envelope.

Usage::

    from photofeed.core.exceptions import NotFound

    raise NotFound("Post not found")
"""
from typing import Dict, List, Optional

from fastapi import status


FieldErrors = List[Dict[str, str]]


class ApiError(Exception):
    """Base class for all errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[FieldErrors] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.message = message or self.default_message
        self.errors = errors
        self.headers = headers
        super().__init__(self.message)

    def __repr__(self):
        return f"<{type(self).__name__}(status={self.status_code}, message={self.message!r})>"


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad Request"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class TooManyRequests(ApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later."


class Internal(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


# =============================================================================
# Token / account failures (all answered with 401)
# =============================================================================

class MalformedToken(Unauthorized):
    default_message = "Invalid token"


class ExpiredToken(Unauthorized):
    default_message = "Token has expired"


class InvalidSignature(Unauthorized):
    default_message = "Invalid token signature"


class AccountGone(Unauthorized):
    default_message = "User account has been deleted or does not exist"


def validation_failed(errors: FieldErrors) -> BadRequest:
    """Field-scoped 400 shared by the validation layer and the upload handler."""
    return BadRequest("Validation failed", errors)
