from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch):
    from tests.utils_auth import seed_user, set_test_env

    set_test_env(monkeypatch, tmp_path)

    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.html").write_text("<h1>A</h1><h2>B</h2><h1>A</h1><h2>—</h2>", encoding="utf-8")
    (docs / "faq.html").write_text("<h1>FAQ</h1>", encoding="utf-8")

    from app.core.config import settings

    monkeypatch.setattr(settings, "DOCS_DIR", str(docs))

    from app.core.db import SessionLocal

    import app.main

    with SessionLocal() as db:
        _, token = seed_user(db)

    c = TestClient(app.main.app)
    c.headers.update({"Authorization": f"Bearer {token}"})
    c._docs = docs  # type: ignore[attr-defined]
    return c


def test_pages_require_principal(client: TestClient):
    assert client.get("/docs", headers={"Authorization": ""}).status_code == 401


def test_list_and_read_page(client: TestClient):
    assert client.get("/docs").json() == {"pages": ["faq", "guide"]}

    r = client.get("/docs/guide", params={"active": "b"})
    assert r.status_code == 200
    data = r.json()
    assert [h["id"] for h in data["headings"]] == ["a", "b", "a-1"]
    assert '<h1 id="a-1">A</h1>' in data["html"]
    assert 'href="#b" class="toc-l2 pl-4 active"' in data["toc"]

    assert client.get("/docs/missing").status_code == 404
    assert client.get("/docs/..%2Fsecret").status_code == 404


def test_page_outline_follows_file_changes(client: TestClient):
    assert [h["id"] for h in client.get("/docs/faq").json()["headings"]] == ["faq"]

    page = client._docs / "faq.html"  # type: ignore[attr-defined]
    page.write_text("<h1>FAQ</h1><h2>Billing</h2><h2>Billing</h2>", encoding="utf-8")
    st = page.stat()
    os.utime(page, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))

    assert [h["id"] for h in client.get("/docs/faq").json()["headings"]] == ["faq", "billing", "billing-1"]


def test_first_outline_waits_for_configured_delay(client: TestClient, monkeypatch):
    from app.core.config import settings
    from app.docs.pages import DocsLibrary

    monkeypatch.setattr(settings, "TOC_INITIAL_DELAY_S", 0.05)
    lib = DocsLibrary(client._docs)  # type: ignore[attr-defined]
    try:
        page = lib.page("guide")
        assert lib.watcher("guide").initial_delay == 0.05
        assert [h.id for h in page.headings] == ["a", "b", "a-1"]
    finally:
        lib.close()

    explicit = DocsLibrary(client._docs, initial_delay=0)  # type: ignore[attr-defined]
    try:
        assert [h.id for h in explicit.page("faq").headings] == ["faq"]
        assert explicit.watcher("faq").initial_delay == 0
    finally:
        explicit.close()
