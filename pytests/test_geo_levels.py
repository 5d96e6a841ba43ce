from __future__ import annotations

import pytest

from models.geo_levels import GeoLevel
from pytests.common import count_rows
from services.errors import (
    AlreadyExists,
    GeoLevelNotFound,
    LevelInUse,
    NameRequired,
    NotFound,
)


def test_add_geo_level_upper_cases_name(service) -> None:
    level = service.add_geo_level("country", 1.0)
    assert level.name == "COUNTRY"
    assert level.rank == 1.0

    assert service.get_geo_level("Country").id == level.id


def test_add_geo_level_without_rank(service) -> None:
    level = service.add_geo_level("REGION")
    assert level.rank is None


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_geo_level_requires_name(service, name) -> None:
    with pytest.raises(NameRequired):
        service.add_geo_level(name, 1.0)
    assert count_rows(GeoLevel) == 0


def test_add_geo_level_duplicate_is_case_insensitive(service) -> None:
    service.add_geo_level("STATE", 2.0)
    with pytest.raises(AlreadyExists):
        service.add_geo_level("state", 5.0)
    assert count_rows(GeoLevel) == 1


def test_update_geo_level_partial(service, levels) -> None:
    updated = service.update_geo_level("state", new_rank=2.5)
    assert updated.name == "STATE"
    assert updated.rank == 2.5

    renamed = service.update_geo_level("STATE", new_name="province")
    assert renamed.name == "PROVINCE"
    assert renamed.rank == 2.5

    with pytest.raises(GeoLevelNotFound):
        service.get_geo_level("STATE")


def test_update_geo_level_same_name_different_case_is_noop(service, levels) -> None:
    updated = service.update_geo_level("CITY", new_name="city")
    assert updated.name == "CITY"


def test_update_geo_level_errors(service, levels) -> None:
    with pytest.raises(NotFound):
        service.update_geo_level("PLANET", new_rank=0.5)

    with pytest.raises(NameRequired):
        service.update_geo_level("STATE", new_name="")

    with pytest.raises(AlreadyExists):
        service.update_geo_level("STATE", new_name="country")

    # Nothing changed after the failures.
    assert service.get_geo_level("STATE").rank == 2.0


def test_delete_geo_level(service, levels) -> None:
    service.delete_geo_level("city")
    with pytest.raises(GeoLevelNotFound):
        service.get_geo_level("CITY")

    with pytest.raises(GeoLevelNotFound):
        service.delete_geo_level("CITY")

    # The name is free again once the old row is deleted.
    again = service.add_geo_level("CITY", 4.0)
    assert again.id != levels["CITY"].id


def test_delete_geo_level_in_use(service, levels) -> None:
    loc = service.add_location("STATE", "Normandy")

    with pytest.raises(LevelInUse):
        service.delete_geo_level("STATE")

    service.delete_location(loc.geo_id)
    service.delete_geo_level("STATE")


def test_find_geo_levels_substring_case_insensitive(service, levels) -> None:
    found = service.find_geo_levels("st")
    assert [lvl.name for lvl in found] == ["STATE", "DISTRICT"]

    assert [lvl.name for lvl in service.find_geo_levels("Coun")] == ["COUNTRY"]


def test_find_geo_levels_no_match_is_not_found(service, levels) -> None:
    with pytest.raises(GeoLevelNotFound):
        service.find_geo_levels("ocean")

    with pytest.raises(NameRequired):
        service.find_geo_levels("")


def test_list_geo_levels_ranked_first(service, levels) -> None:
    service.add_geo_level("AREA")
    names = [lvl.name for lvl in service.list_geo_levels()]
    assert names == ["COUNTRY", "STATE", "DISTRICT", "CITY", "AREA"]


def test_find_geo_levels_folds_case_beyond_ascii(service) -> None:
    service.add_geo_level("état", 2.0)

    assert service.get_geo_level("État").name == "ÉTAT"
    assert [lvl.name for lvl in service.find_geo_levels("éta")] == ["ÉTAT"]
    assert [lvl.name for lvl in service.find_geo_levels("ÉTA")] == ["ÉTAT"]
