"""
Request validation helpers

Input models live in ``photofeed.schemas``; this module runs them and turns
pydantic errors into the ``[{field, message}]`` list used by every 400 response.
"""
from typing import Any, Dict, Iterable, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from photofeed.core.exceptions import FieldErrors, validation_failed

ModelT = TypeVar("ModelT", bound=BaseModel)


def _label(field: str) -> str:
    return field.replace("_", " ")


def format_error(field: str, error: Mapping[str, Any]) -> str:
    """Human readable message for a single pydantic error"""
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}
    label = _label(field)

    if error_type == "missing":
        return f"The {label} field is required."
    if error_type == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"The {label} field is required."
        return f"The {label} must be at least {ctx.get('min_length')} characters."
    if error_type == "string_too_long":
        return f"The {label} may not be greater than {ctx.get('max_length')} characters."
    if error_type == "string_type":
        return f"The {label} must be a string."
    if error_type in ("int_parsing", "int_type"):
        return f"The {label} must be an integer."
    if error_type == "greater_than_equal":
        return f"The {label} must be at least {ctx.get('ge')}."
    if error_type == "less_than_equal":
        return f"The {label} may not be greater than {ctx.get('le')}."
    if error_type in ("uuid_parsing", "uuid_type"):
        return f"The {label} must be a valid id."

    # Custom errors raised by our own validators carry a finished sentence
    return str(error.get("msg", "Invalid value"))


def collect_field_errors(errors: Iterable[Mapping[str, Any]], skip_locations: Iterable[str] = ()) -> FieldErrors:
    """
    Keep the first error per field, preserving field order

    Args:
        errors: pydantic/FastAPI error dicts
        skip_locations: leading ``loc`` items to strip (e.g. "body", "query")

    Returns:
        List of {"field", "message"} dicts
    """
    skip = set(skip_locations)
    collected: Dict[str, str] = {}

    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if str(part) not in skip]
        field = loc[0] if loc else "body"
        if field in collected:
            continue
        collected[field] = format_error(field, error)

    return [{"field": field, "message": message} for field, message in collected.items()]


def validate_input(model: Type[ModelT], data: Optional[Mapping[str, Any]]) -> ModelT:
    """
    Validate raw request data against an input model.

    All fields are checked; the first failure of each field is reported and the
    whole set is raised as one ``BadRequest("Validation failed", errors)``.
    Keys whose value is None count as not sent.
    """
    values = {key: value for key, value in (data or {}).items() if value is not None}
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise validation_failed(collect_field_errors(exc.errors()))

