from __future__ import annotations

import uuid
from typing import Optional

from services.errors import InvalidIdentifier


def parse_geo_id(value) -> str:
    """Normalize a geo id to canonical dashed UUID text.

    Raises:
        InvalidIdentifier: if `value` is not a UUID. Raised before any store
        access so it is never confused with a not-found result.
    """

    try:
        return str(uuid.UUID(str(value).strip()))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(f"invalid geo id: {value!r}", geo_id=str(value)) from None


def try_parse_geo_id(value) -> Optional[str]:
    """Like `parse_geo_id` but returns None for malformed input."""

    try:
        return parse_geo_id(value)
    except InvalidIdentifier:
        return None
