from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db, require_admin, api_limiter
from ..core.errors import SiteError
from ..models import User
from ..schemas import QrCodeCreate, QrCodeIssued, QrCodeList, QrCodeRead
from ..services.qrcodes import issue_qrcode, list_qrcodes

router = APIRouter(prefix="/qrcodes", tags=["qrcodes"], dependencies=[Depends(api_limiter)])

# --- 1) Operator issues a QR code for a document (type + business id)
@router.post("", response_model=QrCodeIssued, status_code=201)
async def create_qrcode(payload: QrCodeCreate, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    try:
        issued = await issue_qrcode(
            db,
            raw_type=payload.type,
            description=payload.description,
            external_id=payload.id,
        )
    except SiteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return QrCodeIssued(
        record=QrCodeRead.from_record(issued.record),
        validation_url=issued.validation_url,
        qr_image_url=issued.qr_image_url,
    )

# --- 2) Operator lists issued codes, newest first
@router.get("", response_model=QrCodeList)
async def get_qrcodes(
    type: str | None = None,
    search: str | None = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        rows = await list_qrcodes(db, doc_type=type, search=search)
    except SiteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return QrCodeList(data=[QrCodeRead.from_record(r) for r in rows])
