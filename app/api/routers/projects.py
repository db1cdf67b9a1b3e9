from __future__ import annotations

import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.security import Principal, get_principal
from app.media.images import ImageFile, partition_images, upload_images
from app.projects import service
from app.projects.errors import UnauthorizedError
from app.projects.form import ProjectForm
from app.projects.revalidate import projects_revision
from app.schemas.project import (
    FormSubmitResult,
    ImageUploadResult,
    ProjectInsert,
    ProjectList,
    ProjectOut,
    ProjectSummary,
    ProjectUpdate,
)

router = APIRouter()


async def _read_files(files: list[UploadFile]) -> list[ImageFile]:
    # One byte past the limit is enough to reject an oversized file.
    limit = settings.MAX_IMAGE_BYTES + 1
    out: list[ImageFile] = []
    for f in files:
        data = await f.read(limit)
        out.append(
            ImageFile(
                filename=f.filename or "upload",
                content_type=f.content_type or "application/octet-stream",
                data=data,
            )
        )
    return out


@router.get("", response_model=ProjectList)
def list_projects(principal: Principal | None = Depends(get_principal), db: Session = Depends(get_db)) -> dict:
    projects = service.list_projects(db, principal)
    return {
        "projects": projects,
        "summary": service.summarize(projects),
        "revision": projects_revision(principal.user_id),
    }


@router.get("/summary", response_model=ProjectSummary)
def project_summary(principal: Principal | None = Depends(get_principal), db: Session = Depends(get_db)) -> dict:
    return service.summarize(service.list_projects(db, principal))


@router.post("", response_model=ProjectOut, status_code=201)
def create_project(
    payload: ProjectInsert, principal: Principal | None = Depends(get_principal), db: Session = Depends(get_db)
) -> dict:
    return service.create_project(db, principal, payload.model_dump())


@router.post("/images", response_model=ImageUploadResult)
async def upload_project_images(
    files: list[UploadFile] = File(...),
    principal: Principal | None = Depends(get_principal),
) -> dict:
    if principal is None:
        raise UnauthorizedError()

    accepted, rejected = partition_images(await _read_files(files))
    urls = upload_images(accepted)
    return {"urls": urls, "rejected": [{"filename": r.filename, "reason": r.reason} for r in rejected]}


@router.post("/form", response_model=FormSubmitResult)
async def submit_project_form(
    response: Response,
    payload: str = Form(...),
    project_id: str | None = Form(default=None),
    files: list[UploadFile] = File(default=[]),
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    """Create or edit a project from the form, uploading any attached images first."""
    if principal is None:
        raise UnauthorizedError()

    try:
        fields = json.loads(payload)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="payload must be a JSON object")
    if not isinstance(fields, dict):
        raise HTTPException(status_code=400, detail="payload must be a JSON object")

    existing = None
    if project_id:
        existing = service.get_project(db, principal, project_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="Project not found")

    with ProjectForm(existing) as form:
        form.update(**{k: v for k, v in fields.items() if k in form.values})
        warnings = form.select_files(await _read_files(files))
        project = form.submit(db, principal)

    response.status_code = 200 if existing else 201
    return {"project": project, "warnings": warnings}


@router.get("/{project_id}", response_model=ProjectOut | None)
def get_project(
    project_id: str, principal: Principal | None = Depends(get_principal), db: Session = Depends(get_db)
) -> dict | None:
    return service.get_project(db, principal, project_id)


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    principal: Principal | None = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    return service.update_project(db, principal, project_id, payload.supplied())


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: str, principal: Principal | None = Depends(get_principal), db: Session = Depends(get_db)
) -> Response:
    service.delete_project(db, principal, project_id)
    return Response(status_code=204)
