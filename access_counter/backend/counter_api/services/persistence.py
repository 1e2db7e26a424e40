# backend/counter_api/services/persistence.py
from __future__ import annotations

from typing import Protocol

from sqlalchemy import insert
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..domain.reading import ReadingRecord
from ..models import CounterHistory
from .storage_errors import StorageUnavailable, WriteRejected

# Core table: plain CursorResult (inserted_primary_key, RETURNING)
_TABLE = CounterHistory.__table__


class ReadingRepository(Protocol):
    backend: str

    def record(self, reading: ReadingRecord) -> int:
        ...


def _row_values(reading: ReadingRecord) -> dict:
    return {
        "current_value": reading.current_value,
        "location": reading.location,
        "kernel": reading.kernel,
        "framework": reading.framework,
        "message": reading.message,
    }


class _SqlReadingRepository:
    """
    Inserts one counter_history row per reading and commits.

    Error mapping (no retry, no fallback):
      - connection can't be acquired, or is invalidated mid-statement -> StorageUnavailable
      - anything else the store refuses -> WriteRejected
    """

    backend = "sql"

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _insert(self, db: Session, reading: ReadingRecord) -> int:
        raise NotImplementedError

    def record(self, reading: ReadingRecord) -> int:
        with self._session_factory() as db:
            try:
                db.connection()
            except SQLAlchemyError as e:
                raise StorageUnavailable(self.backend, str(e)) from e

            try:
                record_id = self._insert(db, reading)
                db.commit()
            except DBAPIError as e:
                db.rollback()
                if e.connection_invalidated:
                    raise StorageUnavailable(self.backend, str(e)) from e
                raise WriteRejected(self.backend, str(e)) from e
            except SQLAlchemyError as e:
                db.rollback()
                raise WriteRejected(self.backend, str(e)) from e

        return int(record_id)


class PostgresReadingRepository(_SqlReadingRepository):
    backend = "postgres"

    def _insert(self, db: Session, reading: ReadingRecord) -> int:
        # single round trip: INSERT ... RETURNING id
        stmt = insert(_TABLE).values(**_row_values(reading)).returning(_TABLE.c.id)
        return db.execute(stmt).scalar_one()


class MySqlReadingRepository(_SqlReadingRepository):
    backend = "mysql"

    def _insert(self, db: Session, reading: ReadingRecord) -> int:
        # no RETURNING on MySQL; id comes from the cursor's lastrowid
        result = db.execute(insert(_TABLE).values(**_row_values(reading)))
        return result.inserted_primary_key[0]
