"""Per-owner revision counter for the project list.

Writers bump the counter after every successful mutation; readers report it
next to a list they always re-derive from storage, so clients can tell a
stale view from a fresh one.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache

from redis import Redis

from app.core.config import settings

log = logging.getLogger("app.revalidate")

_local: dict[str, int] = {}
_local_lock = threading.Lock()


def _key(owner_id: str) -> str:
    return f"{settings.APP_NAME}:projects:rev:{owner_id}"


@lru_cache(maxsize=4)
def _client_for(url: str) -> Redis:
    return Redis.from_url(url, socket_connect_timeout=1, socket_timeout=1)


def _client() -> Redis | None:
    if not settings.REDIS_URL:
        return None
    return _client_for(settings.REDIS_URL)


def revalidate_projects(owner_id: str) -> int:
    """Signal that the owner's project list changed. Returns the new revision."""
    r = _client()
    if r is not None:
        rev = int(r.incr(_key(owner_id)))
    else:
        with _local_lock:
            rev = _local.get(owner_id, 0) + 1
            _local[owner_id] = rev
    log.info("revalidate projects owner=%s rev=%s", owner_id, rev)
    return rev


def projects_revision(owner_id: str) -> int:
    r = _client()
    if r is not None:
        raw = r.get(_key(owner_id))
        return int(raw) if raw is not None else 0
    with _local_lock:
        return _local.get(owner_id, 0)


def revision_store_ready() -> bool:
    r = _client()
    if r is None:
        return True
    try:
        return bool(r.ping())
    except Exception:
        return False
