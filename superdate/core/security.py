from __future__ import annotations

from datetime import timedelta
from typing import Any, cast

import jwt
from passlib.context import CryptContext

from superdate.core.clock import utc_now
from superdate.core.config import settings

_ALGO: str = settings.jwt_algorithm

# A 4-digit PIN has 10k values, so new hashes use argon2.
# bcrypt verifies PINs hashed by the earlier Node service ($2a$/$2b$).
_pin_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    default="argon2",
    deprecated=["bcrypt"],
)


def hash_pin(pin: str) -> str:
    return cast(str, _pin_context.hash(pin))


def verify_pin(pin: str, pin_hash: str) -> bool:
    return cast(bool, _pin_context.verify(pin, pin_hash))


def verify_and_upgrade_pin(pin: str, pin_hash: str) -> tuple[bool, str | None]:
    """Check ``pin`` and return a replacement hash when ``pin_hash`` is legacy.

    The second item is None unless the PIN matched a deprecated scheme.
    """
    ok, new_hash = _pin_context.verify_and_update(pin, pin_hash)
    return cast(bool, ok), cast("str | None", new_hash)


def create_access_token(user_id: str, *, minutes: int | None = None) -> str:
    lifetime = timedelta(minutes=minutes or settings.access_token_expire_minutes)
    payload: dict[str, Any] = {"sub": user_id, "exp": utc_now() + lifetime}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGO)


def decode_token(token: str) -> dict[str, Any]:
    """Decode a bearer token; PyJWT errors propagate to the caller."""
    return cast(
        dict[str, Any],
        jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[_ALGO],
            options={"require": ["exp", "sub"]},
        ),
    )
