"""Shared helpers for tests.

Intended usage:
- spin up a temporary SQLite database
- create all SQLAlchemy tables
- point the app (db.engine / db.SessionLocal) at it
- seed a small, well-known hierarchy

These utilities keep tests small and consistent.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db as db_module
from models import Base

__all__ = [
    "make_sqlite_engine",
    "create_empty_sqlite_db",
    "patch_app_db",
    "count_rows",
    "LEVELS",
    "seed_levels",
]

# (name, rank) pairs used by most tests, top of the hierarchy first.
LEVELS = [
    ("COUNTRY", 1.0),
    ("STATE", 2.0),
    ("DISTRICT", 3.0),
    ("CITY", 4.0),
]


def make_sqlite_engine(db_path: Path | str) -> Engine:
    """Create a SQLite engine suitable for tests (same pragmas as the app)."""

    if isinstance(db_path, Path):
        db_path = str(db_path)
    return db_module.make_engine(f"sqlite:///{db_path}")


def create_empty_sqlite_db(db_path: Path) -> tuple[Session, Engine]:
    """Create an empty SQLite DB file and initialize all models.

    Returns (session, engine).
    """

    engine = make_sqlite_engine(db_path)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    return SessionLocal(), engine


def patch_app_db(monkeypatch, engine: Engine) -> None:
    """Point `db.engine` / `db.SessionLocal` at `engine` for the test's duration."""

    monkeypatch.setattr(db_module, "engine", engine, raising=True)
    monkeypatch.setattr(
        db_module,
        "SessionLocal",
        sessionmaker(autocommit=False, autoflush=False, bind=engine),
        raising=True,
    )


def count_rows(model, *criteria, live_only: bool = True) -> int:
    """Count rows of `model` in a fresh session (sees everything committed so far)."""

    session = db_module.SessionLocal()
    try:
        query = session.query(model).filter(*criteria)
        if live_only:
            query = query.filter(model.deleted_at.is_(None))
        return query.count()
    finally:
        session.close()


def seed_levels(service, levels=LEVELS) -> dict:
    """Create the given geo levels through the service; returns name -> view."""

    return {name: service.add_geo_level(name, rank) for name, rank in levels}
