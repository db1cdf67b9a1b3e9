from __future__ import annotations

import io
import logging
import time
from pathlib import Path
from typing import Callable, TypeVar

from minio import Minio

from app.core.config import settings

log = logging.getLogger("app.object_store")

T = TypeVar("T")


class ObjectStoreError(Exception):
    pass


def put_bytes(*, object_key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
    """Write bytes into the object store.

    Backend: MinIO, or a local filesystem directory when OBJECT_STORE_BACKEND=local.
    Raises ObjectStoreError when the write does not land.
    """

    if _is_local():
        try:
            _put_local(object_key=object_key, data=data)
        except OSError as e:
            raise ObjectStoreError(f"local write failed for {object_key}: {e}") from e
        return object_key

    def _op() -> str:
        c = _client()
        if not c.bucket_exists(settings.MINIO_BUCKET):
            c.make_bucket(settings.MINIO_BUCKET)
        c.put_object(
            settings.MINIO_BUCKET,
            object_key,
            io.BytesIO(data),
            length=len(data),
            content_type=content_type,
        )
        return object_key

    try:
        return _with_retry(_op, attempts=2)
    except Exception as e:
        raise ObjectStoreError(f"upload failed for {object_key}: {e}") from e


def get_bytes(*, object_key: str) -> bytes | None:
    """Read bytes from the object store. Returns None if the object is not available."""

    if _is_local():
        return _get_local(object_key=object_key)

    def _op() -> bytes:
        c = _client()
        res = c.get_object(settings.MINIO_BUCKET, object_key)
        try:
            return res.read()
        finally:
            res.close()
            res.release_conn()

    try:
        return _with_retry(_op, attempts=2)
    except Exception as e:
        log.warning("Object %s not readable: %s", object_key, str(e))
        return None


def public_url(object_key: str) -> str:
    return f"{settings.MEDIA_PUBLIC_BASE_URL.rstrip('/')}/{object_key}"


def _is_local() -> bool:
    return settings.OBJECT_STORE_BACKEND == "local"


def _client() -> Minio:
    return Minio(
        endpoint=settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
    )


def _local_path(object_key: str) -> Path:
    root = Path(settings.LOCAL_OBJECT_STORE_DIR).resolve()
    path = (root / object_key).resolve()
    if root not in path.parents:
        raise ObjectStoreError(f"object key escapes store root: {object_key}")
    return path


def _put_local(*, object_key: str, data: bytes) -> None:
    path = _local_path(object_key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def _get_local(*, object_key: str) -> bytes | None:
    try:
        return _local_path(object_key).read_bytes()
    except (OSError, ObjectStoreError):
        return None


def _with_retry(fn: Callable[[], T], *, attempts: int = 3, sleep_s: float = 0.3) -> T:
    last_exc: Exception | None = None
    for i in range(attempts):
        try:
            return fn()
        except Exception as e:
            last_exc = e
            if i == attempts - 1:
                raise
            time.sleep(sleep_s * (2**i))
    raise last_exc or RuntimeError("minio error")


def object_store_ready() -> bool:
    if _is_local():
        return True
    try:
        c = _client()
        _with_retry(lambda: c.bucket_exists(settings.MINIO_BUCKET), attempts=1)
        return True
    except Exception:
        return False


def ensure_bucket() -> None:
    if _is_local():
        Path(settings.LOCAL_OBJECT_STORE_DIR).mkdir(parents=True, exist_ok=True)
        return

    def _op() -> None:
        c = _client()
        if not c.bucket_exists(settings.MINIO_BUCKET):
            c.make_bucket(settings.MINIO_BUCKET)

    _with_retry(_op, attempts=3)
