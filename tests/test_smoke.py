def test_import_app(monkeypatch):
    # Minimal env for Settings() to load during import.
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("ADMIN_TOKEN", "change-me-admin-token")
    monkeypatch.setenv("OBJECT_STORE_BACKEND", "local")
    monkeypatch.setenv("ENSURE_EXTERNAL_DEPS_ON_STARTUP", "0")

    import app.main  # noqa: F401


def test_health_reports_deps(monkeypatch, tmp_path):
    from tests.utils_auth import set_test_env

    set_test_env(monkeypatch, tmp_path)

    from fastapi.testclient import TestClient

    import app.main

    r = TestClient(app.main.app).get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert set(data["deps"]) == {"database", "object_store", "revision_store"}
