"""Error taxonomy for the location hierarchy services.

Every error carries a stable `code` (used by the HTTP layer and in logs) and
optional `details`. Callers can catch `LocationError` for everything, or the
specific classes below.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LocationError(Exception):
    """Base class for every error raised by the services package."""

    code = "location_error"
    default_message = "location service error"

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details: Optional[Dict[str, Any]] = details or None
        super().__init__(self.message)


class InvalidIdentifier(LocationError):
    """An id failed structural validation before any store access."""

    code = "invalid_identifier"
    default_message = "identifier is not a valid UUID"


class NameRequired(LocationError):
    code = "name_required"
    default_message = "name is required"


class AlreadyExists(LocationError):
    code = "already_exists"
    default_message = "name already exists"


class NotFound(LocationError):
    code = "not_found"
    default_message = "not found"


class LocationNotFound(NotFound):
    default_message = "location not found"


class GeoLevelNotFound(NotFound):
    default_message = "geo level not found"


class NameNotFound(NotFound):
    default_message = "name not found for location"


class ParentAtLevelNotFound(NotFound):
    default_message = "parent at level not found"


class RelationNotFound(NotFound):
    code = "relation_not_found"
    default_message = "relation not found"


class LevelNotExist(LocationError):
    code = "level_not_exist"
    default_message = "geo level does not exist"


class LevelInUse(LocationError):
    code = "level_in_use"
    default_message = "geo level is in use by locations and cannot be deleted"


class InvalidHierarchy(LocationError):
    code = "invalid_hierarchy"
    default_message = "parent rank must be lower than child rank"


class DuplicateRelation(LocationError):
    code = "duplicate_relation"
    default_message = "child already has a parent of this level"


class SelfRelation(LocationError):
    code = "self_relation"
    default_message = "parent and child cannot be the same location"


class CannotDeletePrimary(LocationError):
    code = "cannot_delete_primary"
    default_message = "cannot delete primary name"


class PrimaryNotFound(LocationError):
    code = "primary_not_found"
    default_message = "primary name not found for location"


class DeadlineExceeded(LocationError):
    code = "deadline_exceeded"
    default_message = "deadline exceeded; operation rolled back"
