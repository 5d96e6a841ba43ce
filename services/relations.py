"""Relationship engine: parent -> child edges between locations.

Creation is a one-shot gate evaluated inside the caller's atomic unit:

1. parent == child                              -> SelfRelation
2. parent or child is not a live location       -> LocationNotFound
3. both levels ranked and parent rank >= child  -> InvalidHierarchy
4. child already has a live parent at the
   candidate parent's level                     -> DuplicateRelation
5. insert

The per-level rule spans `location_relations` and `locations`, so it is a
join-based read done after locking the child row. Functions here never commit.
"""

from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from logging_utils import get_logger
from models.location_relations import LocationRelation
from models.locations import Location
from models.mixins import utcnow
from services.errors import (
    DuplicateRelation,
    InvalidHierarchy,
    LocationNotFound,
    RelationNotFound,
    SelfRelation,
)
from services.lookups import find_location
from services.unit_of_work import checkpoint

logger = get_logger(__name__)


def _live_relations(session: Session):
    return session.query(LocationRelation).filter(LocationRelation.deleted_at.is_(None))


def insert_relation(session: Session, parent_id: str, child_id: str) -> LocationRelation:
    """Create a parent -> child edge after validating it.

    The returned row has `parent`, `child` and both geo levels loaded.
    """

    if parent_id == child_id:
        raise SelfRelation(location_id=parent_id)

    # Lock the child first: every edge touching its per-level rule serializes here.
    child = find_location(session, child_id, lock=True)
    parent = find_location(session, parent_id)
    if child is None or parent is None:
        raise LocationNotFound(
            location_id=child_id if child is None else parent_id,
            parent_id=parent_id,
            child_id=child_id,
        )

    parent_rank = parent.geo_level.rank
    child_rank = child.geo_level.rank
    if parent_rank is not None and child_rank is not None and parent_rank >= child_rank:
        logger.warning(
            "RELATION_REJECTED reason=invalid_hierarchy parent=%s(%s:%s) child=%s(%s:%s)",
            parent.id,
            parent.geo_level.name,
            parent_rank,
            child.id,
            child.geo_level.name,
            child_rank,
        )
        raise InvalidHierarchy(
            parent_level=parent.geo_level.name, child_level=child.geo_level.name
        )

    duplicate = (
        _live_relations(session)
        .join(Location, Location.id == LocationRelation.parent_id)
        .filter(
            LocationRelation.child_id == child.id,
            Location.geo_level_id == parent.geo_level_id,
        )
        .first()
    )
    if duplicate is not None:
        logger.warning(
            "RELATION_REJECTED reason=duplicate child=%s level=%s existing_parent=%s",
            child.id,
            parent.geo_level.name,
            duplicate.parent_id,
        )
        raise DuplicateRelation(
            child_id=child.id,
            level=parent.geo_level.name,
            existing_parent_id=duplicate.parent_id,
        )

    relation = LocationRelation(parent=parent, child=child)
    session.add(relation)
    session.flush()

    logger.info("RELATION_ADDED parent=%s child=%s", parent.id, child.id)
    return relation


def insert_children(
    session: Session, parent_id: str, child_ids: Iterable[str]
) -> List[LocationRelation]:
    """Insert one edge per child, in order. Any failure aborts the caller's unit."""

    relations = []
    for child_id in child_ids:
        checkpoint("insert_children")
        relations.append(insert_relation(session, parent_id, child_id))
    return relations


def get_children(session: Session, parent_id: str) -> List[LocationRelation]:
    """Live edges below `parent_id`, each with `child.geo_level` loaded.

    Unknown parents simply have no children.
    """

    return (
        _live_relations(session)
        .filter(LocationRelation.parent_id == parent_id)
        .options(joinedload(LocationRelation.child).joinedload(Location.geo_level))
        .order_by(LocationRelation.created_at, LocationRelation.id)
        .all()
    )


def get_parents(session: Session, child_id: str) -> List[LocationRelation]:
    """Live edges above `child_id`, each with `parent.geo_level` loaded."""

    return (
        _live_relations(session)
        .filter(LocationRelation.child_id == child_id)
        .options(joinedload(LocationRelation.parent).joinedload(Location.geo_level))
        .order_by(LocationRelation.created_at, LocationRelation.id)
        .all()
    )


def delete_relation(session: Session, child_id: str, parent_id: str) -> None:
    """Remove the edge parent -> child; `RelationNotFound` if there is none."""

    relation = (
        _live_relations(session)
        .filter(
            LocationRelation.parent_id == parent_id,
            LocationRelation.child_id == child_id,
        )
        .first()
    )
    if relation is None:
        raise RelationNotFound(
            f"relation not found for parent {parent_id} and child {child_id}",
            parent_id=parent_id,
            child_id=child_id,
        )

    relation.mark_deleted()
    session.flush()
    logger.info("RELATION_REMOVED parent=%s child=%s", parent_id, child_id)


def delete_children(session: Session, parent_id: str, child_ids: Iterable[str]) -> int:
    """Remove the edges to the given children.

    Ids without a matching edge are skipped silently. Returns how many edges
    were removed.
    """

    wanted = set(child_ids)
    if not wanted:
        return 0

    relations = (
        _live_relations(session)
        .filter(
            LocationRelation.parent_id == parent_id,
            LocationRelation.child_id.in_(wanted),
        )
        .all()
    )
    now = utcnow()
    for relation in relations:
        relation.deleted_at = now
    session.flush()

    logger.info(
        "CHILDREN_REMOVED parent=%s requested=%d removed=%d",
        parent_id,
        len(wanted),
        len(relations),
    )
    return len(relations)


def delete_all_relations(session: Session, location_id: str) -> int:
    """Remove every edge where the location is parent or child."""

    removed = (
        _live_relations(session)
        .filter(
            or_(
                LocationRelation.parent_id == location_id,
                LocationRelation.child_id == location_id,
            )
        )
        .update({LocationRelation.deleted_at: utcnow()}, synchronize_session="fetch")
    )
    session.flush()
    return removed
