from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
