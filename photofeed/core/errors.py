"""
Exception handlers mapping errors onto the response envelope
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from photofeed.core.exceptions import ApiError, Unauthorized
from photofeed.core.validation import collect_field_errors
from photofeed.utils.responses import error_response

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie", "form")


async def api_error_handler(request: Request, exc: ApiError):
    headers = dict(exc.headers or {})
    if isinstance(exc, Unauthorized):
        headers.setdefault("WWW-Authenticate", "Bearer")

    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return error_response(
        message=exc.message,
        status_code=exc.status_code,
        errors=exc.errors,
        headers=headers or None
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = collect_field_errors(exc.errors(), skip_locations=REQUEST_LOCATIONS)
    return error_response(message="Validation failed", status_code=400, errors=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        message=str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    stack = None
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.DEBUG and not settings.is_production:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return error_response(message="Internal server error", status_code=500, stack=stack)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
