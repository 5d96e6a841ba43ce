from __future__ import annotations

import uuid

import pytest

from models.location_names import LocationName
from models.location_relations import LocationRelation
from models.locations import Location
from pytests.common import count_rows
from services.errors import (
    AlreadyExists,
    InvalidIdentifier,
    LevelNotExist,
    LocationNotFound,
    NameRequired,
    NotFound,
)


def test_add_location_returns_view(service, levels) -> None:
    loc = service.add_location("city", "Tokyo")

    assert uuid.UUID(loc.geo_id)
    assert loc.geo_level == "CITY"
    assert loc.name == "Tokyo"
    assert loc.aliases == []

    assert service.get_location(loc.geo_id) == loc


def test_add_location_with_aliases(service, levels) -> None:
    loc = service.add_location("CITY", "Tokyo", aliases=["Tokio", "Edo"])
    assert loc.name == "Tokyo"
    assert loc.aliases == ["Edo", "Tokio"]


def test_add_location_with_conflicting_alias_rolls_back(service, levels) -> None:
    with pytest.raises(AlreadyExists):
        service.add_location("CITY", "Tokyo", aliases=["Tokyo"])

    assert count_rows(Location) == 0
    assert count_rows(LocationName) == 0


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_location_requires_name(service, levels, name) -> None:
    with pytest.raises(NameRequired):
        service.add_location("CITY", name)
    assert count_rows(Location) == 0


def test_add_location_unknown_level(service, levels) -> None:
    with pytest.raises(LevelNotExist):
        service.add_location("PLANET", "Earth")
    assert count_rows(Location) == 0


def test_same_name_allowed_on_different_locations(service, levels) -> None:
    a = service.add_location("CITY", "Springfield")
    b = service.add_location("CITY", "Springfield")
    assert a.geo_id != b.geo_id


def test_get_location_errors(service, levels) -> None:
    with pytest.raises(InvalidIdentifier):
        service.get_location("nope")
    with pytest.raises(LocationNotFound):
        service.get_location(str(uuid.uuid4()))


def test_get_location_accepts_upper_case_uuid(service, levels) -> None:
    loc = service.add_location("CITY", "Tokyo")
    assert service.get_location(loc.geo_id.upper()).geo_id == loc.geo_id


def test_get_locations_keeps_input_order(service, world) -> None:
    got = service.get_locations([world.city2, world.country1, world.state1])
    assert [v.geo_id for v in got] == [world.city2, world.country1, world.state1]
    assert [v.name for v in got] == ["City2", "Country1", "State1"]


def test_get_locations_is_all_or_nothing(service, world) -> None:
    with pytest.raises(LocationNotFound):
        service.get_locations([world.city1, str(uuid.uuid4())])

    with pytest.raises(InvalidIdentifier):
        service.get_locations([world.city1, "garbage"])


def test_get_locations_empty_input(service, levels) -> None:
    assert service.get_locations([]) == []
    assert service.get_locations(None) == []


def test_get_locations_by_pattern_returns_full_views(service, levels) -> None:
    japan = service.add_location("COUNTRY", "Japan", aliases=["Nippon"])
    service.add_location("COUNTRY", "Norway")

    got = service.get_locations_by_pattern("nip")
    assert len(got) == 1
    assert got[0].geo_id == japan.geo_id
    assert got[0].name == "Japan"
    assert got[0].aliases == ["Nippon"]

    # A location matching through several names is listed once.
    assert [v.name for v in service.get_locations_by_pattern("n")] == ["Japan", "Norway"]

    assert service.get_locations_by_pattern("xyz") == []
    with pytest.raises(NameRequired):
        service.get_locations_by_pattern(" ")


def test_list_locations(service, world) -> None:
    everything = service.list_locations()
    assert len(everything) == 7

    states = service.list_locations("state")
    assert [v.name for v in states] == ["State1", "State2"]

    with pytest.raises(LevelNotExist):
        service.list_locations("PLANET")


def test_update_location_renames_primary_only(service, levels) -> None:
    loc = service.add_location("CITY", "Edo", aliases=["Yedo"])

    updated = service.update_location(loc.geo_id, name="Tokyo")
    assert updated.name == "Tokyo"
    assert updated.aliases == ["Yedo"]
    assert count_rows(LocationName, LocationName.location_id == loc.geo_id) == 2


def test_update_location_changes_level(service, levels) -> None:
    loc = service.add_location("DISTRICT", "Shibuya")

    updated = service.update_location(loc.geo_id, geo_level="city")
    assert updated.geo_level == "CITY"
    assert updated.name == "Shibuya"

    # Same values again: nothing changes.
    again = service.update_location(loc.geo_id, name="Shibuya", geo_level="CITY")
    assert again == updated


def test_update_location_errors_leave_row_untouched(service, levels) -> None:
    loc = service.add_location("CITY", "Tokyo")

    with pytest.raises(LevelNotExist):
        service.update_location(loc.geo_id, name="Edo", geo_level="PLANET")
    with pytest.raises(NameRequired):
        service.update_location(loc.geo_id, name="  ", geo_level="STATE")
    with pytest.raises(LocationNotFound):
        service.update_location(str(uuid.uuid4()), name="X")
    with pytest.raises(InvalidIdentifier):
        service.update_location("bad", name="X")

    assert service.get_location(loc.geo_id) == loc


def test_update_location_to_alias_text_conflicts(service, levels) -> None:
    loc = service.add_location("CITY", "Tokyo", aliases=["Edo"])
    with pytest.raises(AlreadyExists):
        service.update_location(loc.geo_id, name="Edo")


def test_delete_location_cascades(service, world) -> None:
    service.add_alias(world.state1, "Alias")
    service.add_parent(world.state1, world.country1)
    service.add_parent(world.district1, world.state1)

    service.delete_location(world.state1)

    with pytest.raises(NotFound):
        service.get_location(world.state1)
    assert count_rows(LocationName, LocationName.location_id == world.state1) == 0
    assert count_rows(LocationRelation) == 0
    assert service.get_all_children(world.country1) == []
    assert service.get_all_parents(world.district1) == []

    # Soft delete: rows are kept for history.
    assert count_rows(Location, Location.id == world.state1, live_only=False) == 1

    with pytest.raises(LocationNotFound):
        service.delete_location(world.state1)
