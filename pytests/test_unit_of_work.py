from __future__ import annotations

import pytest

from models.geo_levels import GeoLevel
from models.location_relations import LocationRelation
from pytests.common import count_rows
from services import relations, unit_of_work
from services.errors import AlreadyExists, DeadlineExceeded, NameRequired
from services.location_service import LocationService
from services.unit_of_work import atomic, checkpoint, deadline, flush_or_raise, remaining_s


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(unit_of_work, "_clock", fake)
    return fake


def test_no_deadline_by_default() -> None:
    assert remaining_s() is None
    checkpoint("anything")


def test_deadline_none_is_a_noop(clock) -> None:
    with deadline(None):
        assert remaining_s() is None


def test_nested_deadline_never_extends_outer(clock) -> None:
    with deadline(5):
        with deadline(60):
            assert remaining_s() == 5
        with deadline(1):
            assert remaining_s() == 1
        assert remaining_s() == 5
    assert remaining_s() is None


def test_checkpoint_raises_after_deadline(clock) -> None:
    with deadline(2):
        checkpoint("early")
        clock.advance(2)
        with pytest.raises(DeadlineExceeded) as exc_info:
            checkpoint("late")
    assert exc_info.value.details == {"step": "late"}


def test_atomic_commits_on_success(db_session) -> None:
    with atomic(db_session):
        db_session.add(GeoLevel(name="COUNTRY", rank=1))

    assert count_rows(GeoLevel) == 1


def test_atomic_rolls_back_on_error(db_session) -> None:
    with pytest.raises(NameRequired):
        with atomic(db_session):
            db_session.add(GeoLevel(name="COUNTRY", rank=1))
            db_session.flush()
            raise NameRequired()

    assert count_rows(GeoLevel) == 0


def test_atomic_rolls_back_unexpected_errors(db_session) -> None:
    with pytest.raises(RuntimeError):
        with atomic(db_session):
            db_session.add(GeoLevel(name="COUNTRY", rank=1))
            db_session.flush()
            raise RuntimeError("boom")

    assert count_rows(GeoLevel) == 0


def test_flush_or_raise_translates_unique_violation(db_session) -> None:
    db_session.add(GeoLevel(name="COUNTRY", rank=1))
    db_session.commit()

    db_session.add(GeoLevel(name="COUNTRY", rank=2))
    with pytest.raises(AlreadyExists):
        flush_or_raise(db_session, AlreadyExists(name="COUNTRY"))
    db_session.rollback()

    assert count_rows(GeoLevel) == 1


def test_zero_timeout_fails_before_any_write(service, clock) -> None:
    rushed = LocationService(timeout_s=0)

    with pytest.raises(DeadlineExceeded):
        rushed.add_geo_level("COUNTRY", 1)

    assert count_rows(GeoLevel) == 0


def test_deadline_mid_unit_rolls_back_everything(service, world, clock, monkeypatch) -> None:
    original = relations.insert_relation

    def slow_insert(session, parent_id, child_id):
        relation = original(session, parent_id, child_id)
        clock.advance(10)
        return relation

    monkeypatch.setattr(relations, "insert_relation", slow_insert)

    rushed = LocationService(timeout_s=5)
    with pytest.raises(DeadlineExceeded):
        rushed.add_children(world.country1, [world.state1, world.state2])

    assert count_rows(LocationRelation) == 0


def test_deadline_checked_before_commit(service, world, clock, monkeypatch) -> None:
    original = relations.insert_relation

    def slow_insert(session, parent_id, child_id):
        relation = original(session, parent_id, child_id)
        clock.advance(10)
        return relation

    monkeypatch.setattr(relations, "insert_relation", slow_insert)

    rushed = LocationService(timeout_s=5)
    with pytest.raises(DeadlineExceeded):
        rushed.add_parent(world.state1, world.country1)

    assert count_rows(LocationRelation) == 0
