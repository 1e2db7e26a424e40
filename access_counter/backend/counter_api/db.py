# backend/counter_api/db.py
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import settings


class Base(DeclarativeBase):
    pass


def build_engine(url: str, *, pool_timeout: int | None = None) -> Engine:
    """
    One engine per relational store.

    SQLite is the local default for both stores; FastAPI runs sync handlers on
    a thread pool, so the sqlite connection must be shareable across threads.
    """
    kwargs: dict = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    elif pool_timeout is not None:
        kwargs["pool_timeout"] = int(pool_timeout)
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )


postgres_engine = build_engine(settings.postgres_database_url, pool_timeout=settings.db_pool_timeout_seconds)
mysql_engine = build_engine(settings.mysql_database_url, pool_timeout=settings.db_pool_timeout_seconds)

PostgresSessionLocal = build_session_factory(postgres_engine)
MySqlSessionLocal = build_session_factory(mysql_engine)


def create_tables(*engines: Engine) -> None:
    # models must be imported so the tables are registered on Base.metadata
    from . import models  # noqa: F401

    for engine in engines or (postgres_engine, mysql_engine):
        Base.metadata.create_all(bind=engine)
