"""Failure taxonomy of the swipe/match engine.

``InvalidRequest`` and ``TargetNotFound`` are client errors and are not
worth retrying. ``StorageUnavailable`` and ``TransactionFailure`` mean the
unit of work was rolled back; the swipe is not recorded and the identical
request can be sent again.
"""

from __future__ import annotations


class SwipeError(Exception):
    retryable: bool = False


class InvalidRequest(SwipeError):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class TargetNotFound(SwipeError):
    def __init__(self, target_id: str) -> None:
        super().__init__(f"target user {target_id!r} not found")
        self.target_id = target_id


class StorageUnavailable(SwipeError):
    retryable = True


class TransactionFailure(SwipeError):
    retryable = True
