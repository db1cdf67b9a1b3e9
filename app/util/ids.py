from __future__ import annotations

import hashlib
import secrets
import uuid


def new_uuid() -> str:
    return str(uuid.uuid4())


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
