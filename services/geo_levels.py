"""Geo level registry.

Levels are pure metadata: a unique upper-case name and an optional rank.
Functions here run inside the caller's atomic unit and never commit.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from logging_utils import get_logger
from models.geo_levels import GeoLevel
from models.locations import Location
from services.errors import AlreadyExists, GeoLevelNotFound, LevelInUse, NameRequired
from services.lookups import (
    find_geo_level,
    ilike,
    live_geo_levels,
    live_locations,
    normalize_level_name,
)
from services.unit_of_work import flush_or_raise

logger = get_logger(__name__)


def _required_level_name(name: Optional[str]) -> str:
    norm = normalize_level_name(name)
    if not norm:
        raise NameRequired("geo level name is required")
    return norm


def _ordered(query):
    # Ranked levels first (top of the hierarchy first), unranked last.
    return query.order_by(GeoLevel.rank.is_(None), GeoLevel.rank, GeoLevel.name)


def insert_geo_level(session: Session, name: str, rank: Optional[float] = None) -> GeoLevel:
    norm = _required_level_name(name)

    if find_geo_level(session, norm) is not None:
        raise AlreadyExists("geo level with this name already exists", name=norm)

    level = GeoLevel(name=norm, rank=rank)
    session.add(level)
    flush_or_raise(
        session, AlreadyExists("geo level with this name already exists", name=norm)
    )

    logger.info("GEO_LEVEL_CREATED name=%s rank=%s", norm, rank)
    return level


def get_geo_level(session: Session, name: str) -> GeoLevel:
    norm = _required_level_name(name)
    level = find_geo_level(session, norm)
    if level is None:
        raise GeoLevelNotFound(name=norm)
    return level


def update_geo_level(
    session: Session,
    name: str,
    new_name: Optional[str] = None,
    new_rank: Optional[float] = None,
) -> GeoLevel:
    """Rename and/or re-rank a level. Fields left as None are untouched."""

    norm = _required_level_name(name)
    new_norm = _required_level_name(new_name) if new_name is not None else None

    level = find_geo_level(session, norm)
    if level is None:
        raise GeoLevelNotFound(name=norm)

    if new_norm is not None and new_norm != level.name:
        if find_geo_level(session, new_norm) is not None:
            raise AlreadyExists("geo level with this name already exists", name=new_norm)
        level.name = new_norm

    if new_rank is not None:
        level.rank = new_rank

    flush_or_raise(
        session, AlreadyExists("geo level with this name already exists", name=new_norm)
    )
    logger.info(
        "GEO_LEVEL_UPDATED name=%s new_name=%s new_rank=%s", norm, new_norm, new_rank
    )
    return level


def delete_geo_level(session: Session, name: str) -> None:
    norm = _required_level_name(name)

    level = find_geo_level(session, norm)
    if level is None:
        raise GeoLevelNotFound(name=norm)

    in_use = live_locations(session).filter(Location.geo_level_id == level.id).count()
    if in_use:
        raise LevelInUse(name=norm, locations=in_use)

    level.mark_deleted()
    session.flush()
    logger.info("GEO_LEVEL_DELETED name=%s", norm)


def find_geo_levels(session: Session, pattern: str) -> List[GeoLevel]:
    """Case-insensitive substring search over level names.

    Unlike location search, zero matches is an error (`GeoLevelNotFound`).
    """

    text = (pattern or "").strip()
    if not text:
        raise NameRequired("geo level name is required")

    levels = _ordered(live_geo_levels(session).filter(ilike(GeoLevel.name, text))).all()
    if not levels:
        raise GeoLevelNotFound(pattern=text)
    return levels


def list_geo_levels(session: Session) -> List[GeoLevel]:
    return _ordered(live_geo_levels(session)).all()
