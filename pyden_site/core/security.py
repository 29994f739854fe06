from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Tuple

from passlib.context import CryptContext

from .config import get_settings
settings = get_settings()

# Use bcrypt_sha256 to avoid bcrypt 72-byte issues
_pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return _pwd_context.verify(password, hashed)

def dummy_verify() -> None:
    # burn the same time as a real verify when the account does not exist
    _pwd_context.dummy_verify()

def hash_session_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()

def make_session_token() -> Tuple[str, str]:
    raw = secrets.token_urlsafe(48)
    return raw, hash_session_token(raw)

def session_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.now(timezone.utc)) + timedelta(hours=settings.session_ttl_hours)
