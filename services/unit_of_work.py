"""Atomic units and caller deadlines.

Every multi-step mutation runs inside `atomic(session)`: either every write
commits or the whole unit is rolled back. Validation reads happen inside the
same unit as the writes they guard.

Deadlines are ambient: wrap calls in `with deadline(2.0): ...` and every
`checkpoint()` inside the unit (plus one right before commit) aborts with
`DeadlineExceeded` once the deadline has passed, which rolls the unit back.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from logging_utils import get_logger
from services.errors import DeadlineExceeded, LocationError

logger = get_logger(__name__)

_clock = time.monotonic

# Absolute `_clock()` value after which work must stop.
_deadline_at: ContextVar[Optional[float]] = ContextVar(
    "geo_hierarchy_deadline_at", default=None
)


@contextmanager
def deadline(seconds: Optional[float]) -> Iterator[None]:
    """Bound the work done inside the block to `seconds`.

    Nested deadlines never extend an outer one. `None` leaves the current
    deadline (if any) untouched.
    """

    if seconds is None:
        yield
        return

    expires = _clock() + float(seconds)
    outer = _deadline_at.get()
    if outer is not None:
        expires = min(expires, outer)

    token = _deadline_at.set(expires)
    try:
        yield
    finally:
        _deadline_at.reset(token)


def remaining_s() -> Optional[float]:
    """Seconds left before the ambient deadline, or None when unbounded."""

    expires = _deadline_at.get()
    if expires is None:
        return None
    return max(0.0, expires - _clock())


def checkpoint(step: str = "") -> None:
    """Raise `DeadlineExceeded` if the ambient deadline has passed."""

    left = remaining_s()
    if left is not None and left <= 0:
        raise DeadlineExceeded(step=step or None)


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Run the block as one atomic unit on `session`.

    Commits when the block finishes (and the deadline still holds); rolls back
    on any exception and re-raises it.
    """

    checkpoint("begin")
    try:
        yield session
        checkpoint("commit")
        session.commit()
    except LocationError as exc:
        session.rollback()
        logger.warning("ROLLBACK code=%s message=%s", exc.code, exc.message)
        raise
    except BaseException:
        session.rollback()
        logger.exception("ROLLBACK unexpected error")
        raise


def flush_or_raise(session: Session, error: LocationError) -> None:
    """Flush pending writes; a unique-index violation becomes `error`.

    The partial unique indexes back up the read-then-write checks done by the
    stores, so a concurrent writer that slips past a check still gets a typed
    error instead of a raw `IntegrityError`.
    """

    try:
        session.flush()
    except IntegrityError as exc:
        raise error from exc
