from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath

from app.core.config import settings
from app.media.object_store import ObjectStoreError, public_url, put_bytes
from app.projects.errors import UploadError

log = logging.getLogger("app.images")

STORAGE_PREFIX = "projects"
DEFAULT_EXTENSION = "jpg"


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Rejection:
    filename: str
    reason: str

    def message(self) -> str:
        return f"{self.filename}: {self.reason}"


def rejection_reason(f: ImageFile) -> str | None:
    if not (f.content_type or "").startswith("image/"):
        return "not an image file"
    if f.size > settings.MAX_IMAGE_BYTES:
        limit_mb = settings.MAX_IMAGE_BYTES // (1024 * 1024)
        return f"larger than {limit_mb}MB"
    return None


def partition_images(files: list[ImageFile]) -> tuple[list[ImageFile], list[Rejection]]:
    """Split a selection into accepted files and per-file rejections.

    A bad file never aborts the rest of the selection.
    """
    accepted: list[ImageFile] = []
    rejected: list[Rejection] = []
    for f in files:
        reason = rejection_reason(f)
        if reason:
            rejected.append(Rejection(filename=f.filename, reason=reason))
        else:
            accepted.append(f)
    return accepted, rejected


def storage_name(original_filename: str) -> str:
    ext = PurePosixPath(original_filename or "").suffix.lstrip(".").lower()
    return f"{uuid.uuid4().hex}.{ext or DEFAULT_EXTENSION}"


def upload_images(files: list[ImageFile]) -> list[str]:
    """Upload files one at a time and return their public URLs in order.

    The first failure aborts with UploadError. Objects written before the
    failure stay in the bucket.
    """
    urls: list[str] = []
    for f in files:
        key = f"{STORAGE_PREFIX}/{storage_name(f.filename)}"
        try:
            put_bytes(object_key=key, data=f.data, content_type=f.content_type)
        except ObjectStoreError as e:
            if urls:
                log.warning("Upload aborted after %s stored object(s); left in place: %s", len(urls), urls)
            raise UploadError(f"Failed to upload images: {e}") from e
        urls.append(public_url(key))
    return urls
