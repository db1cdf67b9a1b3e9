from __future__ import annotations

import logging
from typing import Any, Iterable

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.security import Principal
from app.models.tables import Project
from app.projects.errors import StorageError, UnauthorizedError, ValidationFailure
from app.projects.mapper import row_to_record, to_insert_row, to_ui, to_update_row
from app.projects.revalidate import revalidate_projects
from app.util.ids import new_uuid
from app.util.time import now_utc

log = logging.getLogger("app.projects")


def _require(principal: Principal | None) -> Principal:
    if principal is None:
        raise UnauthorizedError()
    return principal


def _signal(owner_id: str) -> None:
    # The write already committed; a missed signal only delays a client refresh.
    try:
        revalidate_projects(owner_id)
    except RedisError as e:
        log.warning("Revalidation signal failed for owner=%s: %s", owner_id, str(e))


def _owned(db: Session, principal: Principal, project_id: str):
    return db.query(Project).filter(Project.id == project_id, Project.user_id == principal.user_id)


def list_projects(db: Session, principal: Principal | None) -> list[dict[str, Any]]:
    p = _require(principal)
    try:
        rows = (
            db.query(Project)
            .filter(Project.user_id == p.user_id)
            .order_by(Project.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to fetch projects: {e}") from e
    return [to_ui(row_to_record(r)) for r in rows]


def get_project(db: Session, principal: Principal | None, project_id: str) -> dict[str, Any] | None:
    """Owner-scoped lookup. Missing and foreign-owned ids both return None."""
    p = _require(principal)
    try:
        row = _owned(db, p, project_id).one_or_none()
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to fetch project: {e}") from e
    return to_ui(row_to_record(row)) if row else None


def create_project(db: Session, principal: Principal | None, values: dict[str, Any]) -> dict[str, Any]:
    p = _require(principal)
    now = now_utc()
    row = Project(id=new_uuid(), user_id=p.user_id, created_at=now, updated_at=now, **to_insert_row(values))
    db.add(row)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to create project: {e}") from e
    db.refresh(row)

    log.info("Project created id=%s owner=%s", row.id, p.user_id)
    _signal(p.user_id)
    return to_ui(row_to_record(row))


def update_project(
    db: Session, principal: Principal | None, project_id: str, values: dict[str, Any]
) -> dict[str, Any]:
    """Write only the fields present in `values` to the owner's record."""
    p = _require(principal)
    changes = to_update_row(values)

    try:
        row: Project | None = _owned(db, p, project_id).one_or_none()
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to update project: {e}") from e
    if row is None:
        raise StorageError("Failed to update project: no row matched", no_rows=True)

    if "image_url" in changes or "cover_image_url" in changes:
        images = changes.get("image_url", row.image_url) or []
        if "cover_image_url" in changes:
            cover = changes["cover_image_url"]
            if cover and cover not in images:
                raise ValidationFailure("coverImageUrl must be one of imageUrl")
        elif row.cover_image_url and row.cover_image_url not in images:
            changes["cover_image_url"] = None

    for col, value in changes.items():
        setattr(row, col, value)
    row.updated_at = now_utc()
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to update project: {e}") from e
    db.refresh(row)

    log.info("Project updated id=%s owner=%s fields=%s", row.id, p.user_id, sorted(changes))
    _signal(p.user_id)
    return to_ui(row_to_record(row))


def delete_project(db: Session, principal: Principal | None, project_id: str) -> None:
    p = _require(principal)
    try:
        deleted = _owned(db, p, project_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to delete project: {e}") from e
    if not deleted:
        raise StorageError("Failed to delete project: no row matched", no_rows=True)

    log.info("Project deleted id=%s owner=%s", project_id, p.user_id)
    _signal(p.user_id)


def summarize(projects: Iterable[dict[str, Any]]) -> dict[str, int]:
    items = list(projects)
    statuses = [x.get("status") for x in items]
    return {
        "total": len(items),
        "inProgress": statuses.count("In Progress"),
        "completed": statuses.count("Completed"),
        "onHold": statuses.count("On Hold"),
    }
