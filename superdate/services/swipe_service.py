from __future__ import annotations

import logging
from dataclasses import dataclass

from superdate.core.clock import utc_now
from superdate.core.errors import (
    InvalidRequest,
    StorageUnavailable,
    TargetNotFound,
    TransactionFailure,
)
from superdate.models.match import Match, canonical_pair
from superdate.models.swipe import Swipe, SwipeAction
from superdate.services.swipe_store import SwipeUnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwipeResult:
    swipe: Swipe
    is_mutual: bool
    match: Match | None = None
    # True only for the call whose insert created the match row
    match_created: bool = False


def parse_action(action: SwipeAction | str | None) -> SwipeAction:
    if action is None or (isinstance(action, str) and not action.strip()):
        raise InvalidRequest("missing_fields")
    try:
        return SwipeAction(action.strip() if isinstance(action, str) else action)
    except ValueError as err:
        raise InvalidRequest("invalid_action") from err


def _validate(
    actor: str,
    target: str | None,
    action: SwipeAction | str | None,
) -> tuple[str, SwipeAction]:
    if target is None or not target.strip():
        raise InvalidRequest("missing_fields")
    decision = parse_action(action)
    target = target.strip()
    if actor == target:
        raise InvalidRequest("cannot_swipe_self")
    return target, decision


def record_swipe(
    actor: str,
    target: str | None,
    action: SwipeAction | str | None,
    uow: SwipeUnitOfWork,
) -> SwipeResult:
    """Record ``actor``'s swipe on ``target`` and create the match on a mutual like.

    The swipe upsert, the reciprocity check and the match insert commit or
    roll back together. Input problems raise ``InvalidRequest`` before the
    store is touched.
    """
    try:
        target, decision = _validate(actor, target, action)
    except InvalidRequest as err:
        logger.debug("swipe rejected for %s: %s", actor, err.code)
        raise

    now = utc_now()
    try:
        with uow.begin() as store:
            if not store.principal_exists(target):
                raise TargetNotFound(target)

            swipe = store.upsert_swipe(actor, target, decision, now)
            if decision != SwipeAction.like:
                return SwipeResult(swipe=swipe, is_mutual=False)

            reciprocal = store.get_swipe(target, actor)
            if reciprocal is None or reciprocal.action != SwipeAction.like:
                return SwipeResult(swipe=swipe, is_mutual=False)

            low_id, high_id = canonical_pair(actor, target)
            match, created = store.insert_match_if_absent(low_id, high_id, now)
    except TargetNotFound:
        logger.debug("swipe rejected: unknown target %s", target)
        raise
    except (StorageUnavailable, TransactionFailure):
        logger.warning(
            "swipe %s -> %s (%s) rolled back",
            actor,
            target,
            decision.value,
            exc_info=True,
        )
        raise

    if created:
        logger.info("match %s created for %s <-> %s", match.id, low_id, high_id)
    return SwipeResult(swipe=swipe, is_mutual=True, match=match, match_created=created)
