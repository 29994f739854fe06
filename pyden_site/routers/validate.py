from __future__ import annotations
from pathlib import Path
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db
from ..core.errors import NotFoundError, SiteError
from ..core.qr import qr_image_url
from ..services.qrcodes import get_by_public_id

router = APIRouter(tags=["validate"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# Public: no session required
@router.get("/validate/{public_id}", response_class=HTMLResponse)
async def validate(public_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    try:
        r = await get_by_public_id(db, public_id)
    except NotFoundError:
        return templates.TemplateResponse(request, "validate_not_found.html", {}, status_code=404)
    except SiteError:
        return templates.TemplateResponse(request, "validate_error.html", {}, status_code=500)
    return templates.TemplateResponse(
        request,
        "validate.html",
        {
            "record": r,
            "created_at": r.created_at.strftime("%Y-%m-%d %H:%M:%S") if r.created_at else "",
            "qr_url": qr_image_url(r.public_id),
        },
    )
