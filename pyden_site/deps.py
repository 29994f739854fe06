from __future__ import annotations
from typing import AsyncGenerator
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_session
from .core.config import get_settings
from .core.errors import AuthError
from .core.mailer import Mailer
from .core.redis import allow_request
from .models import User
from .services import auth_service

settings = get_settings()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for s in get_session():
        yield s

def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer

def session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name)

async def require_admin(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    try:
        return await auth_service.resolve_session(db, session_token(request))
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

# --- rate limits ---

def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"

def rate_limit(route_key: str, max_reqs: int):
    async def _check(request: Request) -> None:
        if not await allow_request(client_ip(request), route_key, max_reqs):
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many requests")
    return _check

auth_limiter = rate_limit("admin.login", settings.rl_auth_max_reqs)
api_limiter = rate_limit("api.qrcodes", settings.rl_api_max_reqs)
