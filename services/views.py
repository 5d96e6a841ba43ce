"""Plain read models returned by the facade.

ORM rows are expired on commit and detached once the session closes, so the
facade converts them into these frozen dataclasses inside the atomic unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.geo_levels import GeoLevel
from models.location_names import LocationName
from models.location_relations import LocationRelation


@dataclass(frozen=True)
class GeoLevelView:
    id: str
    name: str
    rank: Optional[float]

    @classmethod
    def from_row(cls, row: GeoLevel) -> "GeoLevelView":
        return cls(id=row.id, name=row.name, rank=row.rank)


@dataclass(frozen=True)
class LocationView:
    """A location merged with its names.

    `name` is the primary name ("" if the location has none), `aliases` are the
    other names in lexicographic order.
    """

    geo_id: str
    geo_level: str
    name: str = ""
    aliases: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NameBinding:
    id: str
    location_id: str
    name: str
    is_primary: bool

    @classmethod
    def from_row(cls, row: LocationName) -> "NameBinding":
        return cls(
            id=row.id,
            location_id=row.location_id,
            name=row.name,
            is_primary=bool(row.is_primary),
        )


@dataclass(frozen=True)
class NameMatch:
    """A name that matched a pattern search, with its owning location."""

    name: str
    is_primary: bool
    geo_id: str
    geo_level: str

    @classmethod
    def from_row(cls, row: LocationName) -> "NameMatch":
        return cls(
            name=row.name,
            is_primary=bool(row.is_primary),
            geo_id=row.location_id,
            geo_level=row.location.geo_level.name,
        )


@dataclass(frozen=True)
class RelationView:
    id: str
    parent: LocationView
    child: LocationView


def relation_view(row: LocationRelation, views: Dict[str, LocationView]) -> RelationView:
    """Build a RelationView from a row and a `geo_id -> LocationView` map."""

    return RelationView(id=row.id, parent=views[row.parent_id], child=views[row.child_id])
