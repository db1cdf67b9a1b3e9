from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.models.tables import AuthSession, User
from app.util.ids import hash_token
from app.util.time import as_utc, now_utc


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str | None = None


def require_admin_token(x_admin_token: str | None = Header(default=None, alias="X-Admin-Token")) -> None:
    if not x_admin_token or x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid admin token")


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def resolve_principal(db: Session, token: str | None) -> Principal | None:
    """Look up the session principal for a bearer token.

    Unknown, expired or orphaned sessions all resolve to None; callers decide
    whether that is fatal.
    """
    if not token:
        return None

    s: AuthSession | None = db.query(AuthSession).filter(AuthSession.token_hash == hash_token(token)).one_or_none()
    if not s:
        return None
    if as_utc(s.expires_at) < now_utc():
        return None

    user: User | None = db.get(User, s.user_id)
    if not user:
        return None
    return Principal(user_id=user.id, email=user.email)


def get_principal(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Principal | None:
    return resolve_principal(db, _extract_bearer_token(authorization))


def require_principal(principal: Principal | None = Depends(get_principal)) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal
