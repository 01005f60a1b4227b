"""
Common/Shared Pydantic schemas
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError
from typing import Any, Dict


# Config for output schemas: read from ORM rows, serialise with camelCase keys
CamelORMConfig = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class CamelModel(BaseModel):
    model_config = CamelORMConfig

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def strip_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def blank_to_none(value: Any) -> Any:
    value = strip_text(value)
    if isinstance(value, str) and value == "":
        return None
    return value


def check_email_format(value: str) -> str:
    """Validate an address and return it in normalised (lower-case) form"""
    try:
        _, address = validate_email(value)
    except PydanticCustomError:
        raise PydanticCustomError("email_format", "The email format is invalid.")
    return address.lower()
