from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any, cast
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, select

import superdate.core.db as db_module
from superdate.core.db import create_db_engine
from superdate.main import app
from superdate.models.match import Match
from superdate.models.swipe import Swipe
from superdate.services.swipe_store import SqlSwipeStore

TEST_DB_FILENAME = "test_swipe_flow.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILENAME}"


def _register_login(client: TestClient) -> tuple[str, str]:
    phone = f"+44{uuid4().int % 10**10:010d}"
    response = client.post("/api/v1/auth/register", json={"phone": phone, "pin": "2468"})
    assert response.status_code == 201, response.text
    user_id = cast(str, response.json()["user_id"])
    response = client.post("/api/v1/auth/login", json={"phone": phone, "pin": "2468"})
    assert response.status_code == 200, response.text
    return user_id, cast(str, response.json()["access_token"])


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _swipe(client: TestClient, token: str, target: str, action: str) -> dict[str, Any]:
    response = client.post(
        "/api/v1/swipe",
        headers=_auth_headers(token),
        json={"target_user_id": target, "action": action},
    )
    assert response.status_code == 200, response.text
    return cast(dict[str, Any], response.json())


def _match_rows(a_id: str, b_id: str) -> list[Match]:
    low, high = sorted((a_id, b_id))
    with Session(db_module.engine) as session:
        return list(
            session.exec(
                select(Match).where(Match.low_id == low, Match.high_id == high)
            ).all()
        )


@pytest.fixture(scope="module")
def client() -> Iterator[TestClient]:
    original_engine = db_module.engine
    test_engine = create_db_engine(TEST_DB_URL)
    db_module.engine = test_engine

    def override_get_session() -> Iterator[Session]:
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[db_module.get_session] = override_get_session
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(db_module.get_session, None)
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()
    db_module.engine = original_engine
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(TEST_DB_FILENAME + suffix):
            os.remove(TEST_DB_FILENAME + suffix)


def test_swipe_rejects_bad_input(client: TestClient) -> None:
    user_id, token = _register_login(client)
    other_id, _ = _register_login(client)

    cases = [
        ({"target_user_id": user_id, "action": "like"}, 400, "cannot_swipe_self"),
        ({"target_user_id": other_id}, 400, "missing_fields"),
        ({"action": "like"}, 400, "missing_fields"),
        ({"target_user_id": other_id, "action": "superlike"}, 400, "invalid_action"),
        ({"target_user_id": str(uuid4()), "action": "like"}, 404, "target user not found"),
    ]
    for body, expected_status, expected_detail in cases:
        response = client.post(
            "/api/v1/swipe",
            headers=_auth_headers(token),
            json=body,
        )
        assert response.status_code == expected_status, (body, response.text)
        assert response.json()["detail"] == expected_detail

    with Session(db_module.engine) as session:
        rows = session.exec(select(Swipe).where(Swipe.swiper_id == user_id)).all()
    assert rows == []


def test_swipe_requires_authentication(client: TestClient) -> None:
    response = client.post(
        "/api/v1/swipe",
        json={"target_user_id": str(uuid4()), "action": "like"},
    )
    assert response.status_code in (401, 403)


def test_mutual_likes_create_match_once(client: TestClient) -> None:
    a_id, token_a = _register_login(client)
    b_id, token_b = _register_login(client)

    first = _swipe(client, token_a, b_id, "like")
    assert first["is_mutual"] is False
    assert first["match"] is None
    assert first["swipe"]["swiper_id"] == a_id
    assert first["swipe"]["action"] == "like"

    second = _swipe(client, token_b, a_id, "like")
    assert second["is_mutual"] is True
    assert second["match_created"] is True
    match = second["match"]
    assert (match["low_id"], match["high_id"]) == tuple(sorted((a_id, b_id)))

    repeat = _swipe(client, token_b, a_id, "like")
    assert repeat["is_mutual"] is True
    assert repeat["match_created"] is False
    assert repeat["match"] == match

    assert len(_match_rows(a_id, b_id)) == 1

    listing = client.get(
        "/api/v1/matches",
        headers=_auth_headers(token_a),
        params={"limit": 10, "offset": 0},
    )
    assert listing.status_code == 200, listing.text
    assert listing.headers.get("X-Total-Count") == "1"
    items = listing.json()
    assert len(items) == 1
    assert items[0]["other_user_id"] == b_id
    assert items[0]["id"] == match["id"]


def test_pass_after_match_keeps_match(client: TestClient) -> None:
    a_id, token_a = _register_login(client)
    b_id, token_b = _register_login(client)
    _swipe(client, token_a, b_id, "like")
    matched = _swipe(client, token_b, a_id, "like")
    assert matched["is_mutual"] is True

    passed = _swipe(client, token_a, b_id, "pass")
    assert passed["swipe"]["action"] == "pass"
    assert passed["is_mutual"] is False
    assert passed["match"] is None

    with Session(db_module.engine) as session:
        rows = session.exec(
            select(Swipe).where(Swipe.swiper_id == a_id, Swipe.target_id == b_id)
        ).all()
    assert len(rows) == 1
    assert _match_rows(a_id, b_id)[0].id == matched["match"]["id"]

    listing = client.get("/api/v1/matches", headers=_auth_headers(token_b))
    assert listing.headers.get("X-Total-Count") == "1"


def test_pass_history_never_matches(client: TestClient) -> None:
    a_id, token_a = _register_login(client)
    b_id, token_b = _register_login(client)

    _swipe(client, token_a, b_id, "pass")
    _swipe(client, token_a, b_id, "pass")
    result = _swipe(client, token_b, a_id, "like")
    assert result["is_mutual"] is False
    assert result["match"] is None
    assert _match_rows(a_id, b_id) == []


def test_storage_failure_returns_503_and_writes_nothing(
    client: TestClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    a_id, a_token = _register_login(client)
    b_id, _ = _register_login(client)

    def _locked(self: SqlSwipeStore, *args: object) -> Swipe:
        raise OperationalError("INSERT INTO swipe", {}, Exception("database is locked"))

    monkeypatch.setattr(SqlSwipeStore, "upsert_swipe", _locked)
    response = client.post(
        "/api/v1/swipe",
        headers=_auth_headers(a_token),
        json={"target_user_id": b_id, "action": "like"},
    )
    assert response.status_code == 503
    assert response.json()["detail"] == "swipe not recorded, retry"

    with Session(db_module.engine) as session:
        rows = list(session.exec(select(Swipe).where(Swipe.swiper_id == a_id)).all())
    assert rows == []

    monkeypatch.undo()
    assert _swipe(client, a_token, b_id, "like")["swipe"]["action"] == "like"
