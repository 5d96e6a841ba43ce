from __future__ import annotations

from dataclasses import dataclass
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from app import create_app
from pytests.common import create_empty_sqlite_db, patch_app_db, seed_levels
from services.location_service import LocationService


@pytest.fixture()
def db_session(tmp_path, monkeypatch) -> Generator[Session, None, None]:
    """Raw session on a hermetic temp SQLite DB (also patched into `db`)."""

    session, engine = create_empty_sqlite_db(tmp_path / "geo.sqlite")
    patch_app_db(monkeypatch, engine)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def service(db_session) -> LocationService:
    """Service using the patched `db.SessionLocal`."""

    return LocationService()


@pytest.fixture()
def levels(service) -> dict:
    return seed_levels(service)


@dataclass(frozen=True)
class World:
    """A small seeded hierarchy without relations.

    country1, country2 (COUNTRY) / state1, state2 (STATE) /
    district1 (DISTRICT) / city1, city2 (CITY)
    """

    country1: str
    country2: str
    state1: str
    state2: str
    district1: str
    city1: str
    city2: str


@pytest.fixture()
def world(service, levels) -> World:
    def add(level: str, name: str) -> str:
        return service.add_location(level, name).geo_id

    return World(
        country1=add("COUNTRY", "Country1"),
        country2=add("COUNTRY", "Country2"),
        state1=add("STATE", "State1"),
        state2=add("STATE", "State2"),
        district1=add("DISTRICT", "District1"),
        city1=add("CITY", "City1"),
        city2=add("CITY", "City2"),
    )


@pytest.fixture()
def client(db_session):
    app = create_app()
    app.config.update(TESTING=True)
    with app.test_client() as c:
        yield c
