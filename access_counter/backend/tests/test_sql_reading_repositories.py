from __future__ import annotations

import dataclasses

import pytest
from sqlalchemy import select

from counter_api.db import build_engine, build_session_factory
from counter_api.domain.reading import MESSAGE_MYSQL, MESSAGE_POSTGRES, ReadingRecord
from counter_api.models import CounterHistory
from counter_api.services.persistence import MySqlReadingRepository, PostgresReadingRepository
from counter_api.services.storage_errors import StorageUnavailable, WriteRejected


def _reading(value: int = 7, message: str = MESSAGE_POSTGRES) -> ReadingRecord:
    return ReadingRecord(current_value=value, location="eu-west", kernel="5.15", framework="x.y", message=message)


@pytest.mark.parametrize("repo_cls", [PostgresReadingRepository, MySqlReadingRepository])
def test_reading_persists_all_fields_verbatim(repo_cls, postgres_store):
    _, factory = postgres_store
    repo = repo_cls(factory)

    rid = repo.record(_reading())

    with factory() as db:
        row = db.scalar(select(CounterHistory).where(CounterHistory.id == rid))
        assert row is not None
        assert row.current_value == 7
        assert row.location == "eu-west"
        assert row.kernel == "5.15"
        assert row.framework == "x.y"
        assert row.message == MESSAGE_POSTGRES
        assert row.recorded_at is not None


def test_record_ids_are_store_assigned_and_distinct(postgres_store, mysql_store):
    pg = PostgresReadingRepository(postgres_store[1])
    my = MySqlReadingRepository(mysql_store[1])

    pg_ids = [pg.record(_reading(v)) for v in (1, 2, 3)]
    my_ids = [my.record(_reading(v, MESSAGE_MYSQL)) for v in (-1, -2)]

    assert len(set(pg_ids)) == 3
    assert len(set(my_ids)) == 2

    # stores are independent
    with mysql_store[1]() as db:
        values = db.scalars(select(CounterHistory.current_value).order_by(CounterHistory.id)).all()
    assert values == [-1, -2]


def test_long_message_is_not_truncated(mysql_store):
    _, factory = mysql_store
    repo = MySqlReadingRepository(factory)
    msg = "APIContagem - " + ("x" * 5000)

    rid = repo.record(_reading(message=msg))

    with factory() as db:
        assert db.scalar(select(CounterHistory.message).where(CounterHistory.id == rid)) == msg


@pytest.mark.parametrize("repo_cls", [PostgresReadingRepository, MySqlReadingRepository])
def test_unreachable_store_raises_storage_unavailable(repo_cls, tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path}/missing/dir/store.db")
    repo = repo_cls(build_session_factory(engine))

    with pytest.raises(StorageUnavailable) as ei:
        repo.record(_reading())

    assert ei.value.backend == repo.backend
    assert ei.value.__cause__ is not None


def test_constraint_violation_raises_write_rejected(postgres_store):
    _, factory = postgres_store
    repo = PostgresReadingRepository(factory)
    bad = dataclasses.replace(_reading(), location=None)

    with pytest.raises(WriteRejected) as ei:
        repo.record(bad)
    assert ei.value.backend == "postgres"

    # session was rolled back; the store keeps working
    assert repo.record(_reading(8)) >= 1


def test_missing_table_raises_write_rejected(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path}/empty.db")
    repo = MySqlReadingRepository(build_session_factory(engine))

    with pytest.raises(WriteRejected):
        repo.record(_reading())
