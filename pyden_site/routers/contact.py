from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_mailer
from ..core.errors import SiteError
from ..core.mailer import Mailer
from ..schemas import ContactRequest, ContactResponse
from ..services.contact import relay_contact

router = APIRouter(tags=["contact"])

@router.post("/contact", response_model=ContactResponse)
async def contact(payload: ContactRequest, mailer: Mailer = Depends(get_mailer)):
    try:
        await relay_contact(mailer, payload)
    except SiteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ContactResponse(message="Message sent successfully!")
