from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.security import require_admin_token
from app.models.tables import AuthSession, User
from app.util.ids import hash_token, new_session_token, new_uuid
from app.util.time import now_utc

router = APIRouter(dependencies=[Depends(require_admin_token)])


@router.post("/users")
def create_user(payload: dict, db: Session = Depends(get_db)) -> dict:
    # create-or-get by unique email (idempotent)
    email = (payload or {}).get("email")
    display_name = (payload or {}).get("display_name")
    if not email:
        raise HTTPException(status_code=400, detail="Missing email")

    existing: User | None = db.query(User).filter(User.email == email).one_or_none()
    if existing:
        return {"id": existing.id, "email": existing.email, "display_name": existing.display_name}

    user = User(id=new_uuid(), email=email, display_name=display_name, created_at=now_utc())
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another request likely created it concurrently
        existing = db.query(User).filter(User.email == email).one_or_none()
        if existing:
            return {"id": existing.id, "email": existing.email, "display_name": existing.display_name}
        raise

    return {"id": user.id, "email": user.email, "display_name": user.display_name}


@router.post("/users/{user_id}/sessions")
def issue_session(user_id: str, db: Session = Depends(get_db)) -> dict:
    """Issue a bearer token for a user. The raw token is only returned here."""
    if not db.get(User, user_id):
        raise HTTPException(status_code=404, detail="User not found")

    token = new_session_token()
    now = now_utc()
    s = AuthSession(
        id=new_uuid(),
        user_id=user_id,
        token_hash=hash_token(token),
        expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
        created_at=now,
    )
    db.add(s)
    db.commit()
    return {"token": token, "expires_at": s.expires_at, "user_id": user_id}
