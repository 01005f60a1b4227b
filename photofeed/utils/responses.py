"""
Utility functions for API responses
"""
from typing import Any, Dict, Optional
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from photofeed.core.exceptions import FieldErrors


def success_response(
    data: Any = None,
    message: str = "Request completed",
    status_code: int = status.HTTP_200_OK,
    pagination: Optional[Dict[str, int]] = None
) -> JSONResponse:
    """
    Create success response

    Args:
        data: Response data
        message: Success message
        status_code: HTTP status code
        pagination: Optional pagination metadata

    Returns:
        JSONResponse object
    """
    response = {"success": True, "message": message}

    if data is not None:
        response["data"] = jsonable_encoder(data)

    if pagination is not None:
        response["pagination"] = pagination

    return JSONResponse(content=response, status_code=status_code)


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Optional[FieldErrors] = None,
    stack: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Create error response

    Args:
        message: Error message
        status_code: HTTP status code
        errors: Optional field-scoped errors
        stack: Traceback, only passed outside production
        headers: Extra response headers

    Returns:
        JSONResponse object
    """
    response = {
        "success": False,
        "statusCode": status_code,
        "message": message
    }

    if errors:
        response["errors"] = errors

    if stack:
        response["stack"] = stack

    return JSONResponse(content=response, status_code=status_code, headers=headers)


def paginated_response(
    data: Any,
    page: int,
    limit: int,
    total: int,
    total_key: str,
    message: str = "Request completed"
) -> JSONResponse:
    """
    Create paginated response

    Args:
        data: List of items
        page: Current page number
        limit: Items per page
        total: Total number of matching items
        total_key: Name of the total field, e.g. "totalPosts"
        message: Success message

    Returns:
        JSONResponse with data and pagination meta
    """
    total_pages = (total + limit - 1) // limit  # Ceiling division

    pagination = {
        "page": page,
        "limit": limit,
        total_key: total,
        "totalPages": total_pages,
    }
    return success_response(data=data, message=message, pagination=pagination)
