"""Naming store: the primary name and aliases bound to each location.

Invariants (non-deleted rows):
- at most one primary name per location;
- no two bindings of one location share the same text (exact match).

Whenever a new primary is installed, the current one is demoted and flushed
first, so the invariant holds at every flush and therefore at commit.
Functions here run inside the caller's atomic unit and never commit.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, contains_eager

from logging_utils import get_logger
from models.geo_levels import GeoLevel
from models.location_names import LocationName
from models.locations import Location
from models.mixins import utcnow
from services.errors import (
    AlreadyExists,
    CannotDeletePrimary,
    LocationNotFound,
    NameNotFound,
    NameRequired,
    PrimaryNotFound,
)
from services.lookups import find_location, ilike, require_location
from services.unit_of_work import checkpoint, flush_or_raise

logger = get_logger(__name__)


def _required(name: Optional[str]) -> str:
    text = (name or "").strip()
    if not text:
        raise NameRequired()
    return text


def _live_names(session: Session, location_id: str):
    return session.query(LocationName).filter(
        LocationName.location_id == location_id,
        LocationName.deleted_at.is_(None),
    )


def _find_name(session: Session, location_id: str, name: str) -> Optional[LocationName]:
    return _live_names(session, location_id).filter(LocationName.name == name).first()


def _demote_primary(session: Session, location_id: str) -> int:
    demoted = (
        _live_names(session, location_id)
        .filter(LocationName.is_primary.is_(True))
        .update({LocationName.is_primary: False}, synchronize_session="fetch")
    )
    session.flush()
    return demoted


def _already_bound(location_id: str, name: str) -> AlreadyExists:
    return AlreadyExists(
        "name already exists for this location", location_id=location_id, name=name
    )


def add_name(
    session: Session, location_id: str, name: str, is_primary: bool = False
) -> LocationName:
    """Bind `name` to a location.

    With `is_primary=True` any existing primary is demoted to an alias first.
    """

    text = _required(name)
    require_location(session, location_id, lock=True)

    if _find_name(session, location_id, text) is not None:
        raise _already_bound(location_id, text)

    if is_primary:
        _demote_primary(session, location_id)

    row = LocationName(location_id=location_id, name=text, is_primary=bool(is_primary))
    session.add(row)
    flush_or_raise(session, _already_bound(location_id, text))

    logger.info(
        "NAME_ADDED location_id=%s name=%r primary=%s", location_id, text, bool(is_primary)
    )
    return row


def add_names(session: Session, location_id: str, names: Iterable[str]) -> List[LocationName]:
    """Bind several aliases at once; any failure aborts the caller's unit."""

    rows = []
    for name in names:
        checkpoint("add_names")
        rows.append(add_name(session, location_id, name, is_primary=False))
    return rows


def get_names(session: Session, location_id: str) -> List[LocationName]:
    """All live names of a location: primary first, then alphabetical.

    A location with no names yields []; an unknown location raises
    `LocationNotFound`.
    """

    rows = (
        _live_names(session, location_id)
        .order_by(LocationName.is_primary.desc(), LocationName.name.asc())
        .all()
    )
    if not rows and find_location(session, location_id) is None:
        raise LocationNotFound(location_id=location_id)
    return rows


def get_primary_name(session: Session, location_id: str) -> str:
    """Text of the primary name.

    Raises `PrimaryNotFound` both when the location has no primary and when the
    location does not exist.
    """

    row = _live_names(session, location_id).filter(LocationName.is_primary.is_(True)).first()
    if row is None:
        raise PrimaryNotFound(location_id=location_id)
    return row.name


def rename(session: Session, location_id: str, old_name: str, new_name: str) -> LocationName:
    """Change the text of one binding, keeping its primary flag."""

    old_text = _required(old_name)
    new_text = _required(new_name)

    row = _find_name(session, location_id, old_text)
    if row is None:
        raise NameNotFound(
            f"name {old_text} not found for location", location_id=location_id, name=old_text
        )

    clash = (
        _live_names(session, location_id)
        .filter(LocationName.name == new_text, LocationName.id != row.id)
        .first()
    )
    if clash is not None:
        raise _already_bound(location_id, new_text)

    row.name = new_text
    flush_or_raise(session, _already_bound(location_id, new_text))

    logger.info("NAME_RENAMED location_id=%s old=%r new=%r", location_id, old_text, new_text)
    return row


def set_primary_name(session: Session, location_id: str, name: str) -> LocationName:
    """Make `name` the primary name.

    - already primary: no-op;
    - existing alias: current primary demoted, alias promoted;
    - unknown text: current primary demoted, new primary binding created.
    """

    text = _required(name)
    require_location(session, location_id, lock=True)

    row = _find_name(session, location_id, text)
    if row is not None and row.is_primary:
        return row

    _demote_primary(session, location_id)

    if row is None:
        row = LocationName(location_id=location_id, name=text, is_primary=True)
        session.add(row)
    else:
        row.is_primary = True
    flush_or_raise(session, _already_bound(location_id, text))

    logger.info("PRIMARY_NAME_SET location_id=%s name=%r", location_id, text)
    return row


def remove_name(session: Session, location_id: str, name: str) -> bool:
    """Remove an alias.

    Returns False (not an error) when there is nothing to remove. The primary
    name cannot be removed this way; promote another name first.
    """

    text = _required(name)

    row = _find_name(session, location_id, text)
    if row is None:
        return False
    if row.is_primary:
        raise CannotDeletePrimary(location_id=location_id, name=text)

    row.mark_deleted()
    session.flush()
    logger.info("NAME_REMOVED location_id=%s name=%r", location_id, text)
    return True


def remove_all_names(session: Session, location_id: str) -> int:
    """Soft-delete every binding of a location, primary included (cascade only)."""

    removed = _live_names(session, location_id).update(
        {LocationName.deleted_at: utcnow()}, synchronize_session="fetch"
    )
    session.flush()
    return removed


def search_names(session: Session, pattern: str) -> List[LocationName]:
    """Case-insensitive substring search over every live name.

    Each row has `location` and `location.geo_level` loaded. Rows are grouped
    by location (oldest location first) with the primary first in each group.
    An empty list means nothing matched.
    """

    text = (pattern or "").strip()
    if not text:
        raise NameRequired()

    return (
        session.query(LocationName)
        .join(Location, Location.id == LocationName.location_id)
        .join(GeoLevel, GeoLevel.id == Location.geo_level_id)
        .options(contains_eager(LocationName.location).contains_eager(Location.geo_level))
        .filter(
            LocationName.deleted_at.is_(None),
            Location.deleted_at.is_(None),
            ilike(LocationName.name, text),
        )
        .order_by(
            Location.created_at,
            Location.id,
            LocationName.is_primary.desc(),
            LocationName.name.asc(),
        )
        .all()
    )
