from __future__ import annotations

import pytest

from pytests.common import create_empty_sqlite_db
from models.geo_levels import GeoLevel
from utils import recreate_sqlite_db

EXPECTED_TABLES = ["geo_levels", "location_names", "location_relations", "locations"]


def test_recreate_wipes_rows_and_keeps_schema(tmp_path, capsys):
    db_path = tmp_path / "geo.db"
    session, engine = create_empty_sqlite_db(db_path)
    session.add(GeoLevel(name="COUNTRY", rank=1))
    session.commit()
    session.close()
    engine.dispose()

    recreate_sqlite_db.main(["--yes", "--db-path", str(db_path)])

    out = capsys.readouterr().out
    for table in EXPECTED_TABLES:
        assert f"- {table}" in out

    session, engine = create_empty_sqlite_db(db_path)
    try:
        assert session.query(GeoLevel).count() == 0
    finally:
        session.close()
        engine.dispose()


def test_backup_copies_existing_file(tmp_path):
    db_path = tmp_path / "geo.db"
    _, engine = create_empty_sqlite_db(db_path)
    engine.dispose()

    recreate_sqlite_db.main(["--yes", "--backup", "--db-path", str(db_path)])

    backups = list(tmp_path.glob("geo.db.backup_*"))
    assert len(backups) == 1


def test_declined_prompt_aborts(tmp_path, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda _prompt: "n")

    with pytest.raises(SystemExit):
        recreate_sqlite_db.main(["--db-path", str(tmp_path / "geo.db")])

    assert not (tmp_path / "geo.db").exists()
