"""Location (entity) store.

A location is a row bound to one geo level; its names live in the naming
store. Reads return `LocationView`s (location merged with primary name and
aliases). Functions here run inside the caller's atomic unit and never commit.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session, joinedload

from logging_utils import get_logger
from models.location_names import LocationName
from models.locations import Location
from services import names, relations
from services.errors import LevelNotExist, LocationNotFound, NameRequired
from services.lookups import (
    find_geo_level,
    live_locations,
    normalize_level_name,
    require_location,
)
from services.views import LocationView

logger = get_logger(__name__)


def _required(name: Optional[str]) -> str:
    text = (name or "").strip()
    if not text:
        raise NameRequired()
    return text


def _resolve_level(session: Session, geo_level_name: Optional[str]):
    level = find_geo_level(session, geo_level_name)
    if level is None:
        raise LevelNotExist(geo_level=normalize_level_name(geo_level_name))
    return level


def build_views(session: Session, locations: Iterable[Location]) -> Dict[str, LocationView]:
    """Merge locations with their names using a single names query.

    Returns a `geo_id -> LocationView` map.
    """

    locations = list(locations)
    if not locations:
        return {}

    by_location: Dict[str, List[LocationName]] = defaultdict(list)
    rows = (
        session.query(LocationName)
        .filter(
            LocationName.location_id.in_({loc.id for loc in locations}),
            LocationName.deleted_at.is_(None),
        )
        .order_by(LocationName.is_primary.desc(), LocationName.name.asc())
        .all()
    )
    for row in rows:
        by_location[row.location_id].append(row)

    views = {}
    for loc in locations:
        primary = ""
        aliases = []
        for row in by_location.get(loc.id, []):
            if row.is_primary:
                primary = row.name
            else:
                aliases.append(row.name)
        views[loc.id] = LocationView(
            geo_id=loc.id, geo_level=loc.geo_level.name, name=primary, aliases=aliases
        )
    return views


def view_of(session: Session, location: Location) -> LocationView:
    return build_views(session, [location])[location.id]


def insert_location(session: Session, geo_level_name: str, name: str) -> LocationView:
    """Create a location together with its primary name."""

    text = _required(name)
    level = _resolve_level(session, geo_level_name)

    location = Location(geo_level=level)
    session.add(location)
    session.flush()

    session.add(LocationName(location_id=location.id, name=text, is_primary=True))
    session.flush()

    logger.info(
        "LOCATION_CREATED id=%s level=%s name=%r", location.id, level.name, text
    )
    return LocationView(geo_id=location.id, geo_level=level.name, name=text, aliases=[])


def get_location(session: Session, location_id: str) -> LocationView:
    return view_of(session, require_location(session, location_id))


def get_locations(session: Session, location_ids: Sequence[str]) -> List[LocationView]:
    """Views for every id, in input order.

    All or nothing: if any id is unknown, `LocationNotFound` is raised and no
    partial list is returned.
    """

    if not location_ids:
        return []

    found = (
        live_locations(session)
        .options(joinedload(Location.geo_level))
        .filter(Location.id.in_(set(location_ids)))
        .all()
    )
    views = build_views(session, found)

    missing = [loc_id for loc_id in location_ids if loc_id not in views]
    if missing:
        raise LocationNotFound(location_ids=missing)
    return [views[loc_id] for loc_id in location_ids]


def search_locations(session: Session, pattern: str) -> List[LocationView]:
    """Locations with a primary name or alias containing `pattern`.

    Matches are folded back into full views (all names, not only the ones
    that matched). No match yields [].
    """

    matches = names.search_names(session, pattern)

    ordered: List[Location] = []
    seen = set()
    for row in matches:
        if row.location_id not in seen:
            seen.add(row.location_id)
            ordered.append(row.location)

    views = build_views(session, ordered)
    return [views[loc.id] for loc in ordered]


def list_locations(session: Session, geo_level_name: Optional[str] = None) -> List[LocationView]:
    """All live locations, optionally restricted to one geo level."""

    query = live_locations(session).options(joinedload(Location.geo_level))
    if geo_level_name is not None:
        query = query.filter(Location.geo_level_id == _resolve_level(session, geo_level_name).id)

    locations = query.order_by(Location.created_at, Location.id).all()
    views = build_views(session, locations)
    return [views[loc.id] for loc in locations]


def update_location(
    session: Session,
    location_id: str,
    name: Optional[str] = None,
    geo_level_name: Optional[str] = None,
) -> LocationView:
    """Rename the primary name and/or move the location to another level.

    Only the fields provided are touched. Renaming rewrites the primary
    binding in place; aliases are left alone. A level change does not
    re-validate the rank order of existing relations.
    """

    location = require_location(session, location_id, lock=True)

    new_name = _required(name) if name is not None else None
    level = _resolve_level(session, geo_level_name) if geo_level_name is not None else None

    if new_name is not None:
        primary = (
            session.query(LocationName)
            .filter(
                LocationName.location_id == location.id,
                LocationName.is_primary.is_(True),
                LocationName.deleted_at.is_(None),
            )
            .first()
        )
        if primary is None:
            names.set_primary_name(session, location.id, new_name)
        elif primary.name != new_name:
            names.rename(session, location.id, primary.name, new_name)

    if level is not None and level.id != location.geo_level_id:
        logger.info(
            "LOCATION_LEVEL_CHANGED id=%s from=%s to=%s (relations not revalidated)",
            location.id,
            location.geo_level.name,
            level.name,
        )
        location.geo_level = level
        session.flush()

    return view_of(session, location)


def delete_location(session: Session, location_id: str) -> None:
    """Remove a location with all of its names and every relation touching it."""

    location = require_location(session, location_id, lock=True)

    removed_names = names.remove_all_names(session, location.id)
    removed_relations = relations.delete_all_relations(session, location.id)
    location.mark_deleted()
    session.flush()

    logger.info(
        "LOCATION_DELETED id=%s names=%d relations=%d",
        location.id,
        removed_names,
        removed_relations,
    )
