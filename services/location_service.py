"""Location service: the single entry point over the hierarchy stores.

Each public method:
- validates geo ids up front (`InvalidIdentifier`, before touching the DB);
- opens a session, runs the store calls as one atomic unit and closes it;
- returns plain views (`services.views`), never ORM rows.

"All parents/children" are the direct relations only (one hop). Callers that
need the full ancestry walk it hop by hop.

Usage:

    service = LocationService()
    country = service.add_location("country", "France")
    state = service.add_location("state", "Normandy")
    service.add_parent(state.geo_id, country.geo_id)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence

from sqlalchemy.orm import Session

import db
from logging_utils import get_logger
from services import geo_levels, locations, names, relations
from services.errors import ParentAtLevelNotFound
from services.identifiers import parse_geo_id, try_parse_geo_id
from services.lookups import normalize_level_name
from services.unit_of_work import atomic, deadline
from services.views import (
    GeoLevelView,
    LocationView,
    NameBinding,
    NameMatch,
    RelationView,
    relation_view,
)

logger = get_logger(__name__)


class LocationService:
    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        *,
        timeout_s: Optional[float] = None,
    ) -> None:
        # Resolve `db.SessionLocal` lazily so tests can patch it.
        self._session_factory = session_factory
        self.timeout_s = timeout_s

    @contextmanager
    def _unit(self) -> Iterator[Session]:
        factory = self._session_factory or db.SessionLocal
        session = factory()
        try:
            with deadline(self.timeout_s), atomic(session):
                yield session
        finally:
            session.close()

    # --- geo levels -----------------------------------------------------

    def add_geo_level(self, name: str, rank: Optional[float] = None) -> GeoLevelView:
        with self._unit() as session:
            return GeoLevelView.from_row(geo_levels.insert_geo_level(session, name, rank))

    def update_geo_level(
        self,
        name: str,
        new_name: Optional[str] = None,
        new_rank: Optional[float] = None,
    ) -> GeoLevelView:
        with self._unit() as session:
            level = geo_levels.update_geo_level(session, name, new_name, new_rank)
            return GeoLevelView.from_row(level)

    def delete_geo_level(self, name: str) -> None:
        with self._unit() as session:
            geo_levels.delete_geo_level(session, name)

    def get_geo_level(self, name: str) -> GeoLevelView:
        with self._unit() as session:
            return GeoLevelView.from_row(geo_levels.get_geo_level(session, name))

    def find_geo_levels(self, pattern: str) -> List[GeoLevelView]:
        with self._unit() as session:
            return [GeoLevelView.from_row(r) for r in geo_levels.find_geo_levels(session, pattern)]

    def list_geo_levels(self) -> List[GeoLevelView]:
        with self._unit() as session:
            return [GeoLevelView.from_row(r) for r in geo_levels.list_geo_levels(session)]

    # --- locations ------------------------------------------------------

    def add_location(
        self, geo_level: str, name: str, aliases: Sequence[str] = ()
    ) -> LocationView:
        """Create a location with its primary name (and optional aliases)."""

        with self._unit() as session:
            view = locations.insert_location(session, geo_level, name)
            if aliases:
                names.add_names(session, view.geo_id, aliases)
                view = locations.get_location(session, view.geo_id)
            return view

    def update_location(
        self,
        geo_id: str,
        name: Optional[str] = None,
        geo_level: Optional[str] = None,
    ) -> LocationView:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            return locations.update_location(session, location_id, name, geo_level)

    def delete_location(self, geo_id: str) -> None:
        """Delete a location, its names and every relation touching it."""

        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            locations.delete_location(session, location_id)

    def get_location(self, geo_id: str) -> LocationView:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            return locations.get_location(session, location_id)

    def get_locations(self, geo_ids: Optional[Sequence[str]]) -> List[LocationView]:
        """Fetch several locations; fails entirely if any id is unknown."""

        location_ids = [parse_geo_id(g) for g in (geo_ids or [])]
        if not location_ids:
            return []
        with self._unit() as session:
            return locations.get_locations(session, location_ids)

    def get_locations_by_pattern(self, pattern: str) -> List[LocationView]:
        with self._unit() as session:
            return locations.search_locations(session, pattern)

    def list_locations(self, geo_level: Optional[str] = None) -> List[LocationView]:
        with self._unit() as session:
            return locations.list_locations(session, geo_level)

    # --- names ----------------------------------------------------------

    def add_alias(self, geo_id: str, name: str) -> None:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            names.add_name(session, location_id, name, is_primary=False)

    def remove_alias(self, geo_id: str, name: str) -> None:
        """Remove an alias; removing a name that is not bound is a no-op."""

        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            names.remove_name(session, location_id, name)

    def rename_name(self, geo_id: str, old_name: str, new_name: str) -> None:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            names.rename(session, location_id, old_name, new_name)

    def set_primary_name(self, geo_id: str, name: str) -> None:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            names.set_primary_name(session, location_id, name)

    def get_names(self, geo_id: str) -> List[NameBinding]:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            return [NameBinding.from_row(r) for r in names.get_names(session, location_id)]

    def get_primary_name(self, geo_id: str) -> str:
        location_id = parse_geo_id(geo_id)
        with self._unit() as session:
            return names.get_primary_name(session, location_id)

    def search_names(self, pattern: str) -> List[NameMatch]:
        with self._unit() as session:
            return [NameMatch.from_row(r) for r in names.search_names(session, pattern)]

    # --- relations ------------------------------------------------------

    def add_parent(self, geo_id: str, parent_geo_id: str) -> RelationView:
        child_id = parse_geo_id(geo_id)
        parent_id = parse_geo_id(parent_geo_id)
        with self._unit() as session:
            relation = relations.insert_relation(session, parent_id, child_id)
            views = locations.build_views(session, [relation.parent, relation.child])
            return relation_view(relation, views)

    def add_children(self, geo_id: str, child_geo_ids: Sequence[str]) -> List[RelationView]:
        """Attach several children in one unit; any failure adds none of them."""

        parent_id = parse_geo_id(geo_id)
        child_ids = [parse_geo_id(c) for c in (child_geo_ids or [])]
        if not child_ids:
            return []
        with self._unit() as session:
            created = relations.insert_children(session, parent_id, child_ids)
            views = locations.build_views(
                session, [created[0].parent] + [r.child for r in created]
            )
            return [relation_view(r, views) for r in created]

    def remove_parent(self, geo_id: str, parent_geo_id: str) -> None:
        child_id = parse_geo_id(geo_id)
        parent_id = parse_geo_id(parent_geo_id)
        with self._unit() as session:
            relations.delete_relation(session, child_id, parent_id)

    def remove_children(self, geo_id: str, child_geo_ids: Sequence[str]) -> int:
        """Detach children; ids that are malformed or not attached are skipped."""

        parent_id = parse_geo_id(geo_id)
        child_ids = [c for c in (try_parse_geo_id(g) for g in (child_geo_ids or [])) if c]
        with self._unit() as session:
            return relations.delete_children(session, parent_id, child_ids)

    def get_all_parents(self, geo_id: str) -> List[LocationView]:
        """Direct parents only (one hop)."""

        child_id = parse_geo_id(geo_id)
        with self._unit() as session:
            parents = [r.parent for r in relations.get_parents(session, child_id)]
            views = locations.build_views(session, parents)
            return [views[p.id] for p in parents]

    def get_all_children(self, geo_id: str) -> List[LocationView]:
        """Direct children only (one hop)."""

        parent_id = parse_geo_id(geo_id)
        with self._unit() as session:
            children = [r.child for r in relations.get_children(session, parent_id)]
            views = locations.build_views(session, children)
            return [views[c.id] for c in children]

    def get_parent_at_level(self, geo_id: str, geo_level: str) -> LocationView:
        """The direct parent at `geo_level`.

        Only the immediate parents are checked; there is no upward walk. A
        blank level matches nothing, like an unknown one.
        """

        child_id = parse_geo_id(geo_id)
        wanted = normalize_level_name(geo_level)
        with self._unit() as session:
            for relation in relations.get_parents(session, child_id):
                if relation.parent.geo_level.name == wanted:
                    return locations.view_of(session, relation.parent)

        raise ParentAtLevelNotFound(
            f"parent at level {wanted} not found", geo_id=child_id, geo_level=wanted
        )

    def get_children_at_level(self, geo_id: str, geo_level: str) -> List[LocationView]:
        """Direct children at `geo_level`; [] when none (or parent unknown)."""

        parent_id = parse_geo_id(geo_id)
        wanted = normalize_level_name(geo_level)

        with self._unit() as session:
            children = [
                r.child
                for r in relations.get_children(session, parent_id)
                if r.child.geo_level.name == wanted
            ]
            views = locations.build_views(session, children)
            return [views[c.id] for c in children]
