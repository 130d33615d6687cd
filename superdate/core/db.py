from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlmodel import Session, SQLModel, create_engine

from superdate.core.config import settings

# Execution option read by the SQLite "begin" hook: "IMMEDIATE" takes the
# write lock when the transaction starts instead of at the first write.
SQLITE_BEGIN_OPTION = "sqlite_begin"


def create_db_engine(url: str | None = None, **kwargs: Any) -> Engine:
    """Build an engine for ``url`` (defaults to ``settings.database_url``).

    SQLite engines run in WAL mode so open read transactions never block a
    writer, and honour ``SQLITE_BEGIN_OPTION`` when starting transactions.
    """
    url = url or settings.database_url
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, **kwargs)

    new_engine = create_engine(
        url,
        connect_args={
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout,
        },
        **kwargs,
    )

    @event.listens_for(new_engine, "connect")
    def _on_connect(dbapi_connection: Any, _record: Any) -> None:
        # Let the "begin" hook below issue BEGIN instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(new_engine, "begin")
    def _on_begin(conn: Connection) -> None:
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return new_engine


engine = create_db_engine()


def init_db() -> None:
    # Register every table on SQLModel.metadata before create_all
    from superdate.models import match, profile, swipe, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
