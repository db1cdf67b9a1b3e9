from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ADMIN = {"X-Admin-Token": "change-me-admin-token"}


@pytest.fixture()
def client(tmp_path: Path, monkeypatch):
    from tests.utils_auth import set_test_env

    set_test_env(monkeypatch, tmp_path)

    import app.main

    return TestClient(app.main.app)


def test_admin_token_required(client: TestClient):
    assert client.post("/admin/users", json={"email": "a@example.com"}).status_code == 401
    assert client.post("/admin/users", json={"email": "a@example.com"}, headers={"X-Admin-Token": "x"}).status_code == 401


def test_issue_session_and_use_it(client: TestClient):
    u1 = client.post("/admin/users", json={"email": "owner@example.com", "display_name": "Owner"}, headers=ADMIN).json()
    u2 = client.post("/admin/users", json={"email": "owner@example.com"}, headers=ADMIN).json()
    assert u1["id"] == u2["id"]

    s = client.post(f"/admin/users/{u1['id']}/sessions", headers=ADMIN)
    assert s.status_code == 200
    token = s.json()["token"]

    r = client.post(
        "/projects",
        json={"name": "Mine", "category": "Web"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 201
    assert r.json()["user_id"] == u1["id"]

    assert client.post("/admin/users/nobody/sessions", headers=ADMIN).status_code == 404


def test_expired_session_is_not_a_principal(client: TestClient):
    from app.core.db import SessionLocal
    from app.core.security import resolve_principal
    from tests.utils_auth import seed_user

    with SessionLocal() as db:
        user_id, live = seed_user(db)
        _, expired = seed_user(db, ttl_hours=-1)

        assert resolve_principal(db, live).user_id == user_id
        assert resolve_principal(db, expired) is None
        assert resolve_principal(db, "garbage") is None
        assert resolve_principal(db, None) is None

    r = client.get("/projects", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
