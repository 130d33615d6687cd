"""Storage side of the swipe/match engine.

``record_swipe`` only talks to a ``SwipeUnitOfWork``: ``begin()`` yields a
``SwipeStore`` whose writes are committed together when the block exits
normally and discarded when it raises.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import datetime
from typing import Any, Protocol, cast

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, SQLAlchemyError
from sqlalchemy.sql.schema import Table
from sqlmodel import Session, select

from superdate.core.config import settings
from superdate.core.db import SQLITE_BEGIN_OPTION
from superdate.core.errors import StorageUnavailable, SwipeError, TransactionFailure
from superdate.models.match import Match
from superdate.models.swipe import Swipe, SwipeAction
from superdate.models.user import User


class SwipeStore(Protocol):
    def principal_exists(self, user_id: str) -> bool: ...

    def upsert_swipe(
        self,
        swiper_id: str,
        target_id: str,
        action: SwipeAction,
        recorded_at: datetime,
    ) -> Swipe: ...

    def get_swipe(self, swiper_id: str, target_id: str) -> Swipe | None: ...

    def insert_match_if_absent(
        self,
        low_id: str,
        high_id: str,
        created_at: datetime,
    ) -> tuple[Match, bool]:
        """Return the match row for the pair and whether this call created it."""
        ...


class SwipeUnitOfWork(Protocol):
    def begin(self) -> AbstractContextManager[SwipeStore]: ...


def _translate(err: SQLAlchemyError) -> SwipeError:
    if isinstance(err, (InterfaceError, DisconnectionError)) or getattr(
        err, "connection_invalidated", False
    ):
        return StorageUnavailable("database connection lost")
    return TransactionFailure(f"swipe transaction failed: {err.__class__.__name__}")


class SqlSwipeStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _insert(self, table: Table) -> Any:
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise NotImplementedError(f"conflict-tolerant insert not supported on {dialect}")

    def principal_exists(self, user_id: str) -> bool:
        return self.session.get(User, user_id) is not None

    def upsert_swipe(
        self,
        swiper_id: str,
        target_id: str,
        action: SwipeAction,
        recorded_at: datetime,
    ) -> Swipe:
        swipe_table = cast(Table, Swipe.__table__)  # type: ignore[attr-defined]
        stmt = self._insert(swipe_table).values(
            swiper_id=swiper_id,
            target_id=target_id,
            action=action,
            recorded_at=recorded_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["swiper_id", "target_id"],
            set_={
                "action": stmt.excluded.action,
                "recorded_at": stmt.excluded.recorded_at,
            },
        )
        self.session.connection().execute(stmt)

        swipe = self.get_swipe(swiper_id, target_id)
        if swipe is None:  # pragma: no cover
            raise TransactionFailure("swipe row missing after upsert")
        return swipe

    def get_swipe(self, swiper_id: str, target_id: str) -> Swipe | None:
        statement = (
            select(Swipe)
            .where(Swipe.swiper_id == swiper_id, Swipe.target_id == target_id)
            .execution_options(populate_existing=True)
        )
        return self.session.exec(statement).first()

    def insert_match_if_absent(
        self,
        low_id: str,
        high_id: str,
        created_at: datetime,
    ) -> tuple[Match, bool]:
        match_table = cast(Table, Match.__table__)  # type: ignore[attr-defined]
        stmt = (
            self._insert(match_table)
            .values(low_id=low_id, high_id=high_id, created_at=created_at)
            .on_conflict_do_nothing(index_elements=["low_id", "high_id"])
        )
        result = self.session.connection().execute(stmt)
        created = result.rowcount == 1

        statement = (
            select(Match)
            .where(Match.low_id == low_id, Match.high_id == high_id)
            .execution_options(populate_existing=True)
        )
        return self.session.exec(statement).one(), created


class SqlUnitOfWork:
    """One short-lived session and transaction per ``begin()``.

    On SQLite the transaction starts with ``BEGIN IMMEDIATE`` so concurrent
    units of work queue on the write lock. Other databases run it at
    ``isolation_level`` (``settings.swipe_isolation_level`` by default).
    """

    def __init__(self, bind: Engine, *, isolation_level: str | None = None) -> None:
        if bind.dialect.name == "sqlite":
            bind = bind.execution_options(**{SQLITE_BEGIN_OPTION: "IMMEDIATE"})
        else:
            level = isolation_level or settings.swipe_isolation_level
            bind = bind.execution_options(isolation_level=level)
        self.bind = bind

    @contextmanager
    def begin(self) -> Iterator[SqlSwipeStore]:
        try:
            with Session(self.bind, expire_on_commit=False) as session:
                with session.begin():
                    try:
                        session.connection()
                    except SQLAlchemyError as err:
                        raise StorageUnavailable("database unreachable") from err
                    yield SqlSwipeStore(session)
        except SQLAlchemyError as err:
            raise _translate(err) from err
