import re

from bson import ObjectId
from core.errors import ValidationError

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def validate_object_id(value: str, field_name: str) -> None:
    """Validate that a string is a valid MongoDB ObjectId."""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {field_name} format: {value}")

def slugify(value: str) -> str:
    """Lowercase, keep [a-z0-9 -], turn whitespace runs into '-' and collapse dashes."""
    slug = _NON_SLUG_CHARS.sub("", str(value or "").lower().strip())
    slug = _WHITESPACE.sub("-", slug)
    return _DASHES.sub("-", slug)
