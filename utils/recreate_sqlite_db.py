"""Drop and recreate every table of the local geo SQLite DB.

Destructive helper for local development: SQLite has no migrations here, so
after a model change (new partial index, new column) the schema is rebuilt
from the SQLAlchemy models.

Usage:
    python utils/recreate_sqlite_db.py                 # with confirmation prompt
    python utils/recreate_sqlite_db.py --yes           # skip confirmation
    python utils/recreate_sqlite_db.py --backup        # copy the file first
    python utils/recreate_sqlite_db.py --db-path x.db  # another file
"""

from __future__ import annotations

import argparse
import os
import shutil
import sys
from datetime import datetime

# Allow running as: `python utils/recreate_sqlite_db.py`
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from sqlalchemy import inspect

import db
from logging_utils import get_logger
from models import Base

logger = get_logger(__name__)


def _confirm_or_exit(db_path: str, assume_yes: bool) -> None:
    if assume_yes:
        return

    if os.path.exists(db_path):
        size_mb = os.path.getsize(db_path) / (1024 * 1024)
        print(f"\nWARNING: database exists ({size_mb:.2f} MB)")

    resp = input(
        f"\nThis will DROP and RECREATE ALL TABLES in:\n  {db_path}\n\n"
        "All levels, locations, names and relations will be lost.\n\n"
        "Continue? [y/N]: "
    ).strip()
    if resp.lower() not in {"y", "yes"}:
        print("Aborted.")
        raise SystemExit(1)


def create_backup(db_path: str) -> str | None:
    """Copy the DB file next to itself with a timestamp suffix."""

    if not os.path.exists(db_path):
        return None

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = f"{db_path}.backup_{timestamp}"
    shutil.copy2(db_path, backup_path)
    logger.info("DB_BACKUP path=%s", backup_path)
    print(f"Backup created: {backup_path}")
    return backup_path


def recreate(db_path: str) -> list[str]:
    """Drop and recreate all tables in `db_path`; returns the new table names."""

    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

    # A crashed process can leave these behind and block writes.
    for suffix in ("-wal", "-shm"):
        p = db_path + suffix
        if os.path.exists(p):
            os.remove(p)

    engine = db.make_engine(f"sqlite:///{db_path}")
    try:
        Base.metadata.drop_all(engine)
        Base.metadata.create_all(engine)
        tables = sorted(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    logger.info("DB_RECREATED path=%s tables=%s", db_path, ",".join(tables))
    return tables


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Reset the local SQLite database by dropping and recreating all tables."
    )
    parser.add_argument("--yes", "-y", action="store_true", help="Do not prompt for confirmation.")
    parser.add_argument(
        "--backup",
        "-b",
        action="store_true",
        help="Create a timestamped backup before resetting.",
    )
    parser.add_argument("--db-path", default=db.DB_PATH, help="SQLite file to reset.")
    args = parser.parse_args(argv)

    _confirm_or_exit(args.db_path, args.yes)

    if args.backup:
        create_backup(args.db_path)

    tables = recreate(args.db_path)
    print(f"\nRecreated tables ({len(tables)}):")
    for table in tables:
        print(f"  - {table}")
    print(f"\nDatabase location: {args.db_path}")


if __name__ == "__main__":
    main()
