"""Create/edit form state for a project.

Holds the full UI payload, edits the technology and image-url arrays, queues
local image files with transient preview URLs, and submits through the CRUD
service after uploading the queued files.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.security import Principal
from app.media.images import ImageFile, partition_images, upload_images
from app.projects import service
from app.projects.errors import UnauthorizedError, ValidationFailure
from app.schemas.project import ProjectInsert

log = logging.getLogger("app.projects.form")


def blank_values() -> dict[str, Any]:
    return {
        "name": "",
        "description": "",
        "category": "",
        "status": "Planning",
        "progress": 0,
        "priority": "Medium",
        "dueDate": "",
        "imageUrl": [],
        "coverImageUrl": None,
        "websiteUrl": "",
        "projectUrl": "",
        "githubUrl": "",
        "technologies": [],
        "featured": False,
    }


def values_from_project(project: dict[str, Any]) -> dict[str, Any]:
    due = project.get("dueDate")
    return {
        "name": project["name"],
        "description": project.get("description") or "",
        "category": project["category"],
        "status": project["status"],
        "progress": project["progress"],
        "priority": project["priority"],
        "dueDate": due.isoformat() if hasattr(due, "isoformat") else (due or ""),
        "imageUrl": list(project.get("imageUrl") or []),
        "coverImageUrl": project.get("coverImageUrl"),
        "websiteUrl": project.get("websiteUrl") or "",
        "projectUrl": project.get("projectUrl") or "",
        "githubUrl": project.get("githubUrl") or "",
        "technologies": list(project.get("technologies") or []),
        "featured": bool(project.get("featured")),
    }


class PreviewRegistry:
    """Transient preview URLs for files that are not uploaded yet."""

    def __init__(self) -> None:
        self._items: dict[str, ImageFile] = {}

    def create(self, f: ImageFile) -> str:
        url = f"preview:{uuid.uuid4().hex}"
        self._items[url] = f
        return url

    def resolve(self, url: str) -> ImageFile | None:
        return self._items.get(url)

    def release(self, url: str) -> None:
        self._items.pop(url, None)

    def __len__(self) -> int:
        return len(self._items)


class ProjectForm:
    def __init__(self, project: dict[str, Any] | None = None, *, previews: PreviewRegistry | None = None) -> None:
        self.project_id: str | None = project["id"] if project else None
        self.values: dict[str, Any] = values_from_project(project) if project else blank_values()
        self.previews = previews if previews is not None else PreviewRegistry()
        self._pending: list[tuple[ImageFile, str]] = []

    @property
    def is_editing(self) -> bool:
        return self.project_id is not None

    def __enter__(self) -> "ProjectForm":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def update(self, **fields: Any) -> None:
        self.values.update(fields)

    # technologies

    def add_technology(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        self.values["technologies"] = [*self.values.get("technologies", []), text]
        return True

    def remove_technology(self, index: int) -> None:
        self.values["technologies"] = [t for i, t in enumerate(self.values.get("technologies", [])) if i != index]

    # image urls

    def add_image_url(self, url: str) -> bool:
        url = (url or "").strip()
        if not url:
            return False
        self.values["imageUrl"] = [*self.values.get("imageUrl", []), url]
        return True

    def remove_image(self, index: int) -> None:
        images = self.values.get("imageUrl", [])
        removed = images[index] if 0 <= index < len(images) else None
        self.values["imageUrl"] = [u for i, u in enumerate(images) if i != index]
        if removed is not None and removed == self.values.get("coverImageUrl") and removed not in self.values["imageUrl"]:
            self.values["coverImageUrl"] = None

    def set_cover_image(self, url: str | None) -> bool:
        if url is None:
            self.values["coverImageUrl"] = None
            return True
        if url not in self.values.get("imageUrl", []):
            return False
        self.values["coverImageUrl"] = url
        return True

    # local files

    def select_files(self, files: list[ImageFile]) -> list[str]:
        """Queue acceptable files; returns one warning per rejected file."""
        accepted, rejected = partition_images(files)
        for f in accepted:
            self._pending.append((f, self.previews.create(f)))
        warnings = [r.message() for r in rejected]
        for w in warnings:
            log.info("Image rejected: %s", w)
        return warnings

    @property
    def pending_files(self) -> list[ImageFile]:
        return [f for f, _ in self._pending]

    @property
    def preview_urls(self) -> list[str]:
        return [u for _, u in self._pending]

    def remove_file(self, index: int) -> None:
        if 0 <= index < len(self._pending):
            _, url = self._pending.pop(index)
            self.previews.release(url)

    def close(self) -> None:
        for _, url in self._pending:
            self.previews.release(url)
        self._pending = []

    # submit

    def _validated(self, values: dict[str, Any]) -> dict[str, Any]:
        try:
            return ProjectInsert.model_validate(values).model_dump()
        except ValidationError as e:
            raise ValidationFailure(_first_error(e)) from e

    def submit(self, db: Session, principal: Principal | None) -> dict[str, Any]:
        if principal is None:
            raise UnauthorizedError()

        # Reject a bad payload before anything is written to the bucket.
        self._validated(self.values)

        new_urls = upload_images(self.pending_files)
        values = dict(self.values)
        values["imageUrl"] = [*(values.get("imageUrl") or []), *new_urls]
        payload = self._validated(values)

        if self.is_editing:
            project = service.update_project(db, principal, self.project_id, payload)
        else:
            project = service.create_project(db, principal, payload)

        self.values["imageUrl"] = values["imageUrl"]
        self.close()
        return project


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(x) for x in err.get("loc", ()) if x != "__root__")
    return f"{loc}: {err['msg']}" if loc else err["msg"]
