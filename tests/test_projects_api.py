from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch):
    from tests.utils_auth import seed_user, set_test_env

    set_test_env(monkeypatch, tmp_path)

    from app.core.db import SessionLocal

    import app.main

    with SessionLocal() as db:
        user_id, token = seed_user(db)
        other_id, other_token = seed_user(db)

    c = TestClient(app.main.app)
    c.headers.update({"Authorization": f"Bearer {token}"})
    c._user_id = user_id  # type: ignore[attr-defined]
    c._other_token = other_token  # type: ignore[attr-defined]
    return c


def _create(client: TestClient, **over) -> dict:
    body = {"name": "Portfolio", "category": "Web", "status": "Planning", "progress": 10, "priority": "Medium"}
    body.update(over)
    r = client.post("/projects", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def _as_other(client: TestClient) -> dict:
    return {"Authorization": f"Bearer {client._other_token}"}  # type: ignore[attr-defined]


def test_requires_principal(client: TestClient):
    anon = {"Authorization": ""}
    assert client.get("/projects", headers=anon).status_code == 401
    assert client.post("/projects", json={"name": "x", "category": "y"}, headers=anon).status_code == 401
    assert client.get("/projects/whatever", headers=anon).status_code == 401
    assert client.delete("/projects/whatever", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_create_stamps_owner_and_defaults(client: TestClient):
    p = _create(client, user_id="someone-else", dueDate="")
    assert p["user_id"] == client._user_id  # type: ignore[attr-defined]
    assert p["dueDate"] is None
    assert p["imageUrl"] == []
    assert p["technologies"] == []
    assert p["featured"] is False
    assert p["description"] is None

    from app.core.db import SessionLocal
    from app.models.tables import Project

    with SessionLocal() as db:
        row = db.get(Project, p["id"])
        assert row.due_date is None
        assert row.website_url is None


def test_list_is_owner_scoped_newest_first_with_summary(client: TestClient):
    a = _create(client, name="A", status="In Progress")
    b = _create(client, name="B", status="Completed")
    c = _create(client, name="C", status="On Hold")
    client.post(
        "/projects",
        json={"name": "foreign", "category": "x", "status": "Completed"},
        headers=_as_other(client),
    )

    r = client.get("/projects")
    assert r.status_code == 200
    data = r.json()
    assert [p["id"] for p in data["projects"]] == [c["id"], b["id"], a["id"]]
    assert data["summary"] == {"total": 3, "inProgress": 1, "completed": 1, "onHold": 1}

    assert client.get("/projects/summary").json() == data["summary"]


def test_get_missing_or_foreign_returns_null(client: TestClient):
    p = _create(client)
    assert client.get(f"/projects/{p['id']}").json()["id"] == p["id"]

    assert client.get("/projects/does-not-exist").status_code == 200
    assert client.get("/projects/does-not-exist").json() is None

    r = client.get(f"/projects/{p['id']}", headers=_as_other(client))
    assert r.status_code == 200
    assert r.json() is None


def test_partial_update_leaves_other_fields(client: TestClient):
    p = _create(client, websiteUrl="https://site.example", technologies=["fastapi"], dueDate="2026-12-01")

    r = client.patch(f"/projects/{p['id']}", json={"progress": 55})
    assert r.status_code == 200, r.text
    u = r.json()
    assert u["progress"] == 55
    assert u["websiteUrl"] == "https://site.example"
    assert u["technologies"] == ["fastapi"]
    assert u["dueDate"] == "2026-12-01"
    assert u["updated_at"] >= p["updated_at"]

    # explicit clear is distinct from "not supplied"
    r2 = client.patch(f"/projects/{p['id']}", json={"websiteUrl": None, "dueDate": ""})
    assert r2.json()["websiteUrl"] is None
    assert r2.json()["dueDate"] is None
    assert r2.json()["progress"] == 55


def test_update_and_delete_foreign_or_missing_fail(client: TestClient):
    p = _create(client)

    r = client.patch(f"/projects/{p['id']}", json={"name": "hijack"}, headers=_as_other(client))
    assert r.status_code == 404
    assert "no row matched" in r.json()["detail"]

    assert client.delete(f"/projects/{p['id']}", headers=_as_other(client)).status_code == 404
    assert client.patch("/projects/missing", json={"name": "x"}).status_code == 404
    assert client.delete("/projects/missing").status_code == 404

    assert client.get(f"/projects/{p['id']}").json()["name"] == "Portfolio"


def test_delete_removes_record(client: TestClient):
    p = _create(client)
    assert client.delete(f"/projects/{p['id']}").status_code == 204
    assert client.get(f"/projects/{p['id']}").json() is None
    assert client.delete(f"/projects/{p['id']}").status_code == 404


def test_validation(client: TestClient):
    assert client.post("/projects", json={"name": "x", "category": "y", "progress": 101}).status_code == 422
    assert client.post("/projects", json={"name": "x", "category": "y", "status": "Done"}).status_code == 422
    assert (
        client.post(
            "/projects", json={"name": "x", "category": "y", "imageUrl": ["a.png"], "coverImageUrl": "b.png"}
        ).status_code
        == 422
    )

    p = _create(client, imageUrl=["a.png", "b.png"], coverImageUrl="a.png")
    assert client.patch(f"/projects/{p['id']}", json={"name": None}).status_code == 422
    assert client.patch(f"/projects/{p['id']}", json={"coverImageUrl": "c.png"}).status_code == 422


def test_dropping_cover_image_clears_cover(client: TestClient):
    p = _create(client, imageUrl=["a.png", "b.png"], coverImageUrl="a.png")
    r = client.patch(f"/projects/{p['id']}", json={"imageUrl": ["b.png"]})
    assert r.json()["coverImageUrl"] is None

    r2 = client.patch(f"/projects/{p['id']}", json={"coverImageUrl": "b.png"})
    assert r2.json()["coverImageUrl"] == "b.png"


def test_mutations_bump_revision(client: TestClient):
    rev0 = client.get("/projects").json()["revision"]
    p = _create(client)
    client.patch(f"/projects/{p['id']}", json={"featured": True})
    client.delete(f"/projects/{p['id']}")
    assert client.get("/projects").json()["revision"] == rev0 + 3

    # failed mutations do not signal
    client.delete("/projects/missing")
    assert client.get("/projects").json()["revision"] == rev0 + 3


def test_revision_store_reuses_one_redis_client(client: TestClient, monkeypatch):
    from app.core.config import settings
    from app.projects import revalidate

    monkeypatch.setattr(settings, "REDIS_URL", "redis://localhost:6399/0")
    first = revalidate._client()
    assert first is not None
    assert revalidate._client() is first

    monkeypatch.setattr(settings, "REDIS_URL", "redis://localhost:6399/1")
    assert revalidate._client() is not first

    monkeypatch.setattr(settings, "REDIS_URL", None)
    assert revalidate._client() is None
