from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.api.routers.admin import router as admin_router
from app.api.routers.docs import router as docs_router
from app.api.routers.media import router as media_router
from app.api.routers.projects import router as projects_router
from app.core.config import settings
from app.core.db import engine
from app.core.logging import configure_logging
from app.media.object_store import ensure_bucket, object_store_ready
from app.projects.errors import ProjectError
from app.projects.revalidate import revision_store_ready

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("app")

# /docs serves documentation pages; the OpenAPI UI moves aside.
app = FastAPI(title=settings.APP_NAME, docs_url="/swagger", redoc_url=None)


def _retry_backoff(fn, *, attempts: int = 30, base_sleep_s: float = 1.0, max_sleep_s: float = 2.0, what: str) -> bool:
    sleep_s = base_sleep_s
    for i in range(1, attempts + 1):
        try:
            fn()
            return True
        except Exception as e:
            if i == attempts:
                log.error("Startup: %s still not ready after %s attempts: %s", what, attempts, str(e))
                return False
            log.warning("Startup: %s not ready (attempt %s/%s): %s", what, i, attempts, str(e))
            time.sleep(sleep_s)
            sleep_s = min(max_sleep_s, sleep_s * 2.0)
    return False


def _check_database() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@app.on_event("startup")
def _startup() -> None:
    # Do not crash API if deps are temporarily unavailable.
    if not settings.ENSURE_EXTERNAL_DEPS_ON_STARTUP:
        log.info("Startup: ENSURE_EXTERNAL_DEPS_ON_STARTUP=false; skipping object store ensure")
        return

    _retry_backoff(ensure_bucket, what="object store")


@app.exception_handler(ProjectError)
async def _project_error(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
def health() -> dict[str, Any]:
    deps = {
        "database": _check_database(),
        "object_store": object_store_ready(),
        "revision_store": revision_store_ready(),
    }
    return {"ok": all(deps.values()), "deps": deps, "app": settings.APP_NAME}


app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(projects_router, prefix="/projects", tags=["projects"])
app.include_router(docs_router, prefix="/docs", tags=["docs"])
app.include_router(media_router, prefix="/media", tags=["media"])
