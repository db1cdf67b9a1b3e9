from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from app.core.config import settings
from app.core.security import Principal, require_principal
from app.docs.pages import DocsLibrary
from app.docs.toc import render_toc

router = APIRouter()


@lru_cache(maxsize=1)
def _library(root: str) -> DocsLibrary:
    return DocsLibrary(root)


def get_library() -> DocsLibrary:
    return _library(settings.DOCS_DIR)


@router.get("")
def list_pages(_: Principal = Depends(require_principal), lib: DocsLibrary = Depends(get_library)) -> dict:
    return {"pages": lib.pages()}


@router.get("/{page}")
def read_page(
    page: str,
    active: str | None = None,
    _: Principal = Depends(require_principal),
    lib: DocsLibrary = Depends(get_library),
) -> dict:
    doc = lib.page(page)
    if doc is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return {
        "page": doc.name,
        "html": doc.html,
        "headings": [h.to_dict() for h in doc.headings],
        "toc": render_toc(doc.headings, active_id=active),
    }
