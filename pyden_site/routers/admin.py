from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db, require_admin, session_token, auth_limiter
from ..models import User
from ..schemas import LoginRequest, LoginResponse, UserRead
from ..core.errors import SiteError
from ..core.config import get_settings
from ..services import auth_service

router = APIRouter(prefix="/admin", tags=["admin"])
settings = get_settings()

@router.post("/login", response_model=LoginResponse, dependencies=[Depends(auth_limiter)])
async def login(payload: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    try:
        user, raw, expires_at = await auth_service.login(db, email=payload.email, password=payload.password)
    except SiteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    response.set_cookie(
        settings.session_cookie_name,
        raw,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    return LoginResponse(user=UserRead.from_user(user), expires_at=expires_at)


@router.post("/logout", status_code=204)
async def logout(request: Request, db: AsyncSession = Depends(get_db)):
    await auth_service.logout(db, session_token(request))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite="lax", secure=settings.cookie_secure)
    return response


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(require_admin)):
    return UserRead.from_user(user)
