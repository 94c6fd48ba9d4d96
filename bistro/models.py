"""
Document Models

Roles, identifier parsing and document serialization for the MongoDB
collections. Documents are plain dicts; these helpers are the only place
where raw string ids become ``ObjectId`` values.
"""

import enum
from typing import Any, Iterable

from bson import ObjectId
from bson.errors import InvalidId

from bistro.core.exceptions import ValidationError


class Role(str, enum.Enum):
    """User roles. Users without a role field have no elevated access."""
    NONE = "none"
    ADMIN = "admin"


def parse_object_id(value: Any) -> ObjectId:
    """
    Parse a client-supplied identifier into an ObjectId.

    Raises:
        ValidationError: value is not a 24-character hex id
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid id: {value!r}")


def parse_object_ids(values: Iterable[Any]) -> list[ObjectId]:
    """Parse every id in order; the first malformed one fails the whole list."""
    return [parse_object_id(value) for value in values]


def coerce_object_ids(values: Iterable[Any]) -> list[ObjectId]:
    """Like parse_object_ids but silently skips values that are not ids."""
    ids = []
    for value in values or []:
        if isinstance(value, ObjectId):
            ids.append(value)
        elif ObjectId.is_valid(value):
            ids.append(ObjectId(value))
    return ids


def serialize_document(value: Any) -> Any:
    """Recursively convert ObjectIds so the document can be sent as JSON."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: serialize_document(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize_document(v) for v in value]
    return value
