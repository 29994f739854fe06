from __future__ import annotations

from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import AuthError, ValidationError
from ..core.logging import get_logger
from ..core.security import (
    dummy_verify, hash_password, hash_session_token, make_session_token,
    session_expiry, verify_password,
)
from ..models import AdminSession, User

log = get_logger("auth")


def _clean_email(email: str | None) -> str:
    return (email or "").strip().lower()


async def create_user(db: AsyncSession, *, email: str, password: str, role: str = "admin") -> User:
    email = _clean_email(email)
    exists = (await db.execute(select(User.id).where(User.email == email))).scalar_one_or_none()
    if exists:
        raise ValueError("email already registered")
    user = User(email=email, password_hash=hash_password(password), role=role, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def ensure_admin(db: AsyncSession, *, email: str | None, password: str | None) -> User | None:
    """Seed the initial operator if it is configured and missing."""
    if not email or not password:
        return None
    user = (await db.execute(select(User).where(User.email == _clean_email(email)))).scalar_one_or_none()
    if user:
        return user
    user = await create_user(db, email=email, password=password)
    log.info("initial admin user created: %s", user.email)
    return user


async def login(db: AsyncSession, *, email: str | None, password: str | None) -> Tuple[User, str, datetime]:
    email = _clean_email(email)
    if not email or not password:
        raise ValidationError("email and password are required")

    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if not user or not user.is_active:
        dummy_verify()
        log.warning("failed login for %s", email)
        raise AuthError("invalid credentials")
    if not verify_password(password, user.password_hash):
        log.warning("failed login for %s", email)
        raise AuthError("invalid credentials")

    now = datetime.now(timezone.utc)
    # housekeeping: drop this user's expired sessions
    await db.execute(
        delete(AdminSession).where(AdminSession.user_id == user.id, AdminSession.expires_at <= now)
    )
    raw, token_hash = make_session_token()
    expires_at = session_expiry(now)
    db.add(AdminSession(user_id=user.id, token_hash=token_hash, expires_at=expires_at))
    await db.commit()
    log.info("admin login: %s", email)
    return user, raw, expires_at


async def resolve_session(db: AsyncSession, raw_token: str | None) -> User:
    if not raw_token:
        raise AuthError("login required")
    now = datetime.now(timezone.utc)
    row = (await db.execute(
        select(User)
        .join(AdminSession, AdminSession.user_id == User.id)
        .where(AdminSession.token_hash == hash_session_token(raw_token), AdminSession.expires_at > now)
    )).scalar_one_or_none()
    if not row or not row.is_active:
        raise AuthError("login required")
    return row


async def logout(db: AsyncSession, raw_token: str | None) -> None:
    if not raw_token:
        return
    await db.execute(delete(AdminSession).where(AdminSession.token_hash == hash_session_token(raw_token)))
    await db.commit()
