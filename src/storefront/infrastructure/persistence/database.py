"""Engine and session factory.

SQLite needs help to behave like a server database here: pysqlite's own
transaction handling is switched off and every transaction is opened
with ``BEGIN IMMEDIATE``, which takes the write lock up front.  That
serializes writers across connections, and SAVEPOINTs work as expected.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.infrastructure.persistence.orm import Base

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def create_db_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        engine = _create_sqlite_engine(url, echo)
    else:
        engine = create_engine(url, echo=echo, pool_pre_ping=True)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _create_sqlite_engine(url: str, echo: bool) -> Engine:
    connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees its own empty DB.
        engine = create_engine(
            url, echo=echo, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        engine = create_engine(url, echo=echo, connect_args=connect_args)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine
