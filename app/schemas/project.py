from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

ProjectStatus = Literal["Planning", "In Progress", "Completed", "On Hold"]
ProjectPriority = Literal["High", "Medium", "Low"]

# Form inputs send "" for untouched optional fields.
_BLANK_TO_NONE = ("description", "dueDate", "coverImageUrl", "websiteUrl", "projectUrl", "githubUrl")


class ProjectInsert(BaseModel):
    """UI-shaped payload for creating a project. The owner comes from the session."""

    name: str = Field(min_length=1)
    description: str | None = None
    category: str = Field(min_length=1)
    status: ProjectStatus = "Planning"
    progress: int = Field(default=0, ge=0, le=100)
    priority: ProjectPriority = "Medium"
    dueDate: date | None = None
    imageUrl: list[str] | None = None
    coverImageUrl: str | None = None
    websiteUrl: str | None = None
    projectUrl: str | None = None
    githubUrl: str | None = None
    technologies: list[str] | None = None
    featured: bool = False

    @field_validator(*_BLANK_TO_NONE, mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _cover_in_images(self):
        if self.coverImageUrl and self.coverImageUrl not in (self.imageUrl or []):
            raise ValueError("coverImageUrl must be one of imageUrl")
        return self


class ProjectUpdate(BaseModel):
    """Partial update. Only fields present in the request body are written."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1)
    status: ProjectStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    priority: ProjectPriority | None = None
    dueDate: date | None = None
    imageUrl: list[str] | None = None
    coverImageUrl: str | None = None
    websiteUrl: str | None = None
    projectUrl: str | None = None
    githubUrl: str | None = None
    technologies: list[str] | None = None
    featured: bool | None = None

    @field_validator(*_BLANK_TO_NONE, mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _required_not_cleared(self):
        for name in ("name", "category", "status", "progress", "priority", "featured"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def supplied(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ProjectOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    category: str
    status: ProjectStatus
    progress: int
    priority: ProjectPriority
    dueDate: date | None = None
    imageUrl: list[str] = Field(default_factory=list)
    coverImageUrl: str | None = None
    websiteUrl: str | None = None
    projectUrl: str | None = None
    githubUrl: str | None = None
    technologies: list[str] | None = None
    featured: bool
    created_at: datetime
    updated_at: datetime
    user_id: str


class ProjectSummary(BaseModel):
    total: int
    inProgress: int
    completed: int
    onHold: int


class ProjectList(BaseModel):
    projects: list[ProjectOut]
    summary: ProjectSummary
    revision: int


class UploadRejection(BaseModel):
    filename: str
    reason: str


class ImageUploadResult(BaseModel):
    urls: list[str]
    rejected: list[UploadRejection] = Field(default_factory=list)


class FormSubmitResult(BaseModel):
    project: ProjectOut
    warnings: list[str] = Field(default_factory=list)
