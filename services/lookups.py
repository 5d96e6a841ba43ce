"""Small query helpers shared by the stores.

All helpers only see non-deleted rows.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.geo_levels import GeoLevel
from models.locations import Location
from services.errors import LocationNotFound


def live_locations(session: Session):
    return session.query(Location).filter(Location.deleted_at.is_(None))


def live_geo_levels(session: Session):
    return session.query(GeoLevel).filter(GeoLevel.deleted_at.is_(None))


def find_location(
    session: Session, location_id: str, *, lock: bool = False
) -> Optional[Location]:
    """Return the live location or None.

    With `lock=True` the row is selected FOR UPDATE so concurrent units that
    touch the same location (primary-name changes, new parents) serialize on
    engines with row locking. SQLite ignores the clause; there every unit
    starts with BEGIN IMMEDIATE (see `db.make_engine`), so whole units serialize.
    """

    query = live_locations(session).filter(Location.id == location_id)
    if lock:
        query = query.with_for_update()
    return query.one_or_none()


def require_location(session: Session, location_id: str, *, lock: bool = False) -> Location:
    location = find_location(session, location_id, lock=lock)
    if location is None:
        raise LocationNotFound(location_id=location_id)
    return location


def normalize_level_name(name: Optional[str]) -> str:
    """Canonical geo level name: trimmed and upper-cased ("" when blank)."""

    return (name or "").strip().upper()


def find_geo_level(session: Session, name: Optional[str]) -> Optional[GeoLevel]:
    """Case-insensitive exact lookup of a live geo level."""

    norm = normalize_level_name(name)
    if not norm:
        return None
    return live_geo_levels(session).filter(GeoLevel.name == norm).one_or_none()


def like_pattern(text: str) -> str:
    """Lower-cased `%text%` LIKE pattern with `%`, `_` and `\\` escaped.

    Use with `escape="\\\\"` so the input is matched as a literal substring.
    """

    escaped = (
        text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


def ilike(column, text: str):
    """Portable case-insensitive substring filter for `column`."""

    return func.lower(column).like(like_pattern(text), escape="\\")
