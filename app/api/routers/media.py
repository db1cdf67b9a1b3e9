from __future__ import annotations

import mimetypes

from fastapi import APIRouter, HTTPException, Response

from app.media.images import STORAGE_PREFIX
from app.media.object_store import get_bytes

router = APIRouter()


@router.get("/{object_key:path}")
def read_media(object_key: str) -> Response:
    # Uploaded project images are public, like a public bucket.
    if not object_key.startswith(f"{STORAGE_PREFIX}/"):
        raise HTTPException(status_code=404, detail="Not found")

    data = get_bytes(object_key=object_key)
    if data is None:
        raise HTTPException(status_code=404, detail="Not found")

    media_type, _ = mimetypes.guess_type(object_key)
    return Response(content=data, media_type=media_type or "application/octet-stream")
