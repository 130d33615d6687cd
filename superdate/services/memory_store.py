from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime

from superdate.models.match import Match
from superdate.models.swipe import Swipe, SwipeAction


class MemorySwipeStore:
    def __init__(
        self,
        swipes: dict[tuple[str, str], Swipe],
        matches: dict[tuple[str, str], Match],
        principals: set[str] | None,
        next_id: int,
    ) -> None:
        self.swipes = swipes
        self.matches = matches
        self.principals = principals
        self.next_id = next_id

    def _allocate_id(self) -> int:
        allocated = self.next_id
        self.next_id += 1
        return allocated

    def principal_exists(self, user_id: str) -> bool:
        return self.principals is None or user_id in self.principals

    def upsert_swipe(
        self,
        swiper_id: str,
        target_id: str,
        action: SwipeAction,
        recorded_at: datetime,
    ) -> Swipe:
        key = (swiper_id, target_id)
        previous = self.swipes.get(key)
        # Replace rather than mutate: the committed dict may still hold `previous`
        swipe = Swipe(
            id=previous.id if previous is not None else self._allocate_id(),
            swiper_id=swiper_id,
            target_id=target_id,
            action=action,
            recorded_at=recorded_at,
        )
        self.swipes[key] = swipe
        return swipe

    def get_swipe(self, swiper_id: str, target_id: str) -> Swipe | None:
        return self.swipes.get((swiper_id, target_id))

    def insert_match_if_absent(
        self,
        low_id: str,
        high_id: str,
        created_at: datetime,
    ) -> tuple[Match, bool]:
        key = (low_id, high_id)
        existing = self.matches.get(key)
        if existing is not None:
            return existing, False
        match = Match(
            id=self._allocate_id(),
            low_id=low_id,
            high_id=high_id,
            created_at=created_at,
        )
        self.matches[key] = match
        return match, True


class MemoryUnitOfWork:
    """In-process stand-in for ``SqlUnitOfWork``.

    Units of work run one at a time. Each works on copies of the committed
    tables; the copies replace the committed state only if the block exits
    without raising.
    """

    def __init__(self, principals: Iterable[str] | None = None) -> None:
        self._lock = threading.Lock()
        self.swipes: dict[tuple[str, str], Swipe] = {}
        self.matches: dict[tuple[str, str], Match] = {}
        self.principals = set(principals) if principals is not None else None
        self.begin_count = 0
        self._next_id = 1

    @contextmanager
    def begin(self) -> Iterator[MemorySwipeStore]:
        with self._lock:
            self.begin_count += 1
            store = MemorySwipeStore(
                dict(self.swipes),
                dict(self.matches),
                self.principals,
                self._next_id,
            )
            yield store
            self.swipes = store.swipes
            self.matches = store.matches
            self._next_id = store.next_id
