"""
Identifier helpers.

Ids are opaque strings everywhere in the system. Legacy rows may carry ids that
look numeric and newer ones UUID-like values; both are compared as canonical
strings and never parsed.
"""

import uuid
from typing import Any

from fightpicks.services.errors import ValidationError


def new_id() -> str:
    """Generate an id for a row created by this system."""
    return uuid.uuid4().hex


def canonical_id(value: Any, field: str = "id") -> str:
    """
    Canonicalize an incoming identifier to its string form.

    Raises:
        ValidationError: If the value is missing or blank
    """
    if value is None:
        raise ValidationError(f"{field} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def optional_id(value: Any):
    """Canonicalize an identifier that may legitimately be absent."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
