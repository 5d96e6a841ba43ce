from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy import create_engine, event
import os


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Configure SQLite for concurrent read/write and enforce foreign keys."""
    # Let SQLAlchemy's "begin" hook emit BEGIN instead of pysqlite.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    # Wait for locks instead of failing immediately.
    cursor.execute("PRAGMA busy_timeout=5000")
    # Better concurrency (readers not blocked by writers).
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    # SQLite ships with FK enforcement off.
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # Built-in lower() only folds ASCII; pattern search needs full Unicode folding.
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def _begin_immediate(conn):
    # Take the write lock up front so a unit's validation reads and its writes
    # cannot interleave with another writer's.
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str):
    """Create an engine; SQLite URLs get the connection pragmas above."""

    if url.startswith("sqlite"):
        eng = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            pool_pre_ping=True,
        )
        event.listen(eng, "connect", _set_sqlite_pragmas)
        event.listen(eng, "begin", _begin_immediate)
        return eng
    return create_engine(url, pool_pre_ping=True)


DB_PATH = os.path.join(os.path.dirname(__file__), "data", "geo.db")
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{DB_PATH}"

if SQLALCHEMY_DATABASE_URL == f"sqlite:///{DB_PATH}":
    os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)

engine = make_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
