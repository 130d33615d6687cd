from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from superdate.core.errors import InvalidRequest, TargetNotFound, TransactionFailure
from superdate.models.match import Match, canonical_pair
from superdate.models.swipe import SwipeAction
from superdate.services.memory_store import MemorySwipeStore, MemoryUnitOfWork
from superdate.services.swipe_service import SwipeResult, record_swipe

ALICE = "3f1c8a52-0000-4000-8000-000000000001"
BOB = "0b7e4d19-0000-4000-8000-000000000002"
CAROL = "9a2f6e33-0000-4000-8000-000000000003"


@pytest.fixture
def uow() -> MemoryUnitOfWork:
    return MemoryUnitOfWork(principals={ALICE, BOB, CAROL})


@pytest.mark.parametrize(
    ("target", "action", "code"),
    [
        (ALICE, "like", "cannot_swipe_self"),
        (ALICE, SwipeAction.pass_, "cannot_swipe_self"),
        (None, "like", "missing_fields"),
        ("  ", "like", "missing_fields"),
        (BOB, None, "missing_fields"),
        (BOB, "", "missing_fields"),
        (BOB, "superlike", "invalid_action"),
    ],
)
def test_invalid_requests_never_touch_storage(
    uow: MemoryUnitOfWork,
    target: str | None,
    action: str | None,
    code: str,
) -> None:
    with pytest.raises(InvalidRequest) as excinfo:
        record_swipe(ALICE, target, action, uow)
    assert excinfo.value.code == code
    assert uow.begin_count == 0
    assert uow.swipes == {}


def test_unknown_target_writes_nothing(uow: MemoryUnitOfWork) -> None:
    with pytest.raises(TargetNotFound):
        record_swipe(ALICE, "not-a-user", "like", uow)
    assert uow.swipes == {}


def test_repeated_pass_keeps_single_swipe(uow: MemoryUnitOfWork) -> None:
    first = record_swipe(ALICE, BOB, "pass", uow)
    second = record_swipe(ALICE, BOB, "pass", uow)

    assert list(uow.swipes) == [(ALICE, BOB)]
    assert uow.swipes[(ALICE, BOB)].action == SwipeAction.pass_
    assert second.swipe.id == first.swipe.id
    assert second.swipe.recorded_at >= first.swipe.recorded_at
    assert not second.is_mutual
    assert uow.matches == {}


def test_one_sided_like_has_no_match(uow: MemoryUnitOfWork) -> None:
    result = record_swipe(ALICE, BOB, "like", uow)

    assert result == SwipeResult(swipe=result.swipe, is_mutual=False)
    assert result.swipe.action == SwipeAction.like
    assert uow.matches == {}


def test_mutual_like_creates_canonical_match(uow: MemoryUnitOfWork) -> None:
    record_swipe(ALICE, BOB, "like", uow)
    result = record_swipe(BOB, ALICE, SwipeAction.like, uow)

    assert result.is_mutual
    assert result.match_created
    assert result.match is not None
    # BOB sorts before ALICE
    assert (result.match.low_id, result.match.high_id) == (BOB, ALICE)
    assert list(uow.matches) == [canonical_pair(ALICE, BOB)]


def test_relike_after_match_reuses_existing_row(uow: MemoryUnitOfWork) -> None:
    record_swipe(ALICE, BOB, "like", uow)
    created = record_swipe(BOB, ALICE, "like", uow)
    record_swipe(ALICE, BOB, "pass", uow)
    again = record_swipe(ALICE, BOB, "like", uow)

    assert again.is_mutual
    assert not again.match_created
    assert again.match == created.match
    assert len(uow.matches) == 1


def test_pass_after_match_keeps_match(uow: MemoryUnitOfWork) -> None:
    record_swipe(ALICE, BOB, "like", uow)
    record_swipe(BOB, ALICE, "like", uow)

    result = record_swipe(ALICE, BOB, "pass", uow)

    assert not result.is_mutual
    assert result.match is None
    assert uow.swipes[(ALICE, BOB)].action == SwipeAction.pass_
    assert len(uow.swipes) == 2
    assert canonical_pair(ALICE, BOB) in uow.matches


def test_failed_match_insert_rolls_back_swipe(
    uow: MemoryUnitOfWork,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    record_swipe(ALICE, BOB, "like", uow)

    def _boom(
        self: MemorySwipeStore,
        low_id: str,
        high_id: str,
        created_at: datetime,
    ) -> tuple[Match, bool]:
        raise TransactionFailure("constraint violation")

    monkeypatch.setattr(MemorySwipeStore, "insert_match_if_absent", _boom)
    with pytest.raises(TransactionFailure):
        record_swipe(BOB, ALICE, "like", uow)

    assert (BOB, ALICE) not in uow.swipes
    assert uow.matches == {}

    monkeypatch.undo()
    retried = record_swipe(BOB, ALICE, "like", uow)
    assert retried.match_created


def test_concurrent_likes_converge_on_one_match(uow: MemoryUnitOfWork) -> None:
    calls = [(ALICE, BOB), (BOB, ALICE)] * 20

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(
            pool.map(lambda pair: record_swipe(pair[0], pair[1], "like", uow), calls)
        )

    assert len(uow.swipes) == 2
    assert len(uow.matches) == 1
    assert sum(result.match_created for result in results) == 1
    match_ids = {result.match.id for result in results if result.match is not None}
    assert len(match_ids) == 1
