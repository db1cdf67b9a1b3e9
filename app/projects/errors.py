from __future__ import annotations


class ProjectError(Exception):
    """Base class for failures surfaced to the caller as {"detail": message}."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(ProjectError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class StorageError(ProjectError):
    """Database or bucket failure. `no_rows` marks an owner-scoped predicate that matched nothing."""

    def __init__(self, message: str, *, no_rows: bool = False) -> None:
        super().__init__(message)
        self.no_rows = no_rows
        self.status_code = 404 if no_rows else 500


class ValidationFailure(ProjectError):
    status_code = 422


class UploadError(ProjectError):
    status_code = 502
