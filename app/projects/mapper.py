"""Translation between the persistence record (snake_case) and the UI record (camelCase).

The renames are an explicit table; every other field passes through
unchanged. Nothing here validates.
"""

from __future__ import annotations

from typing import Any

from app.models.tables import Project

# (persistence column, UI field)
RENAMES: tuple[tuple[str, str], ...] = (
    ("due_date", "dueDate"),
    ("image_url", "imageUrl"),
    ("cover_image_url", "coverImageUrl"),
    ("website_url", "websiteUrl"),
    ("project_url", "projectUrl"),
    ("github_url", "githubUrl"),
)

PASSTHROUGH: tuple[str, ...] = (
    "id",
    "name",
    "description",
    "category",
    "status",
    "progress",
    "priority",
    "technologies",
    "featured",
    "created_at",
    "updated_at",
    "user_id",
)

TO_UI: dict[str, str] = dict(RENAMES)
TO_DB: dict[str, str] = {ui: db for db, ui in RENAMES}

# Fields a caller may write. id, owner and timestamps are server-controlled.
WRITABLE_UI_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "category",
    "status",
    "progress",
    "priority",
    "dueDate",
    "imageUrl",
    "coverImageUrl",
    "websiteUrl",
    "projectUrl",
    "githubUrl",
    "technologies",
    "featured",
)

_LIST_COLUMNS = ("image_url", "technologies")
_NULLABLE_COLUMNS = ("description", "due_date", "cover_image_url", "website_url", "project_url", "github_url")


def row_to_record(row: Project) -> dict[str, Any]:
    cols = PASSTHROUGH + tuple(db for db, _ in RENAMES)
    return {c: getattr(row, c) for c in cols}


def to_ui(record: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in record.items():
        out[TO_UI.get(key, key)] = value
    if out.get("imageUrl") is None:
        out["imageUrl"] = []
    return out


def _column(ui_key: str) -> str:
    return TO_DB.get(ui_key, ui_key)


def to_insert_row(values: dict[str, Any]) -> dict[str, Any]:
    """UI values -> insert row. Missing or empty optionals become null / []."""
    row: dict[str, Any] = {}
    for key in WRITABLE_UI_FIELDS:
        row[_column(key)] = values.get(key)

    for col in _NULLABLE_COLUMNS:
        if not row.get(col):
            row[col] = None
    for col in _LIST_COLUMNS:
        row[col] = list(row.get(col) or [])
    row["featured"] = bool(row.get("featured") or False)
    return row


def to_update_row(values: dict[str, Any]) -> dict[str, Any]:
    """UI values -> update row. Only keys present in `values` are emitted."""
    row: dict[str, Any] = {}
    for key in WRITABLE_UI_FIELDS:
        if key not in values:
            continue
        value = values[key]
        if key == "imageUrl" and value is None:
            value = []
        row[_column(key)] = value
    return row
