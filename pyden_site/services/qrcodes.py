from __future__ import annotations
import uuid
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import DuplicateError, InternalError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..core.normalize import canonical_type, normalize_type
from ..core.qr import qr_image_url, remove_qr_png, validation_url, write_qr_png
from ..models import QrRecord

LIST_LIMIT = 200

log = get_logger("qrcodes")


@dataclass
class IssuedQrCode:
    record: QrRecord
    validation_url: str
    qr_image_url: str


def _clean(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


async def _pair_exists(db: AsyncSession, doc_type: str, external_id: str) -> bool:
    row = (await db.execute(
        select(QrRecord.id).where(QrRecord.type == doc_type, QrRecord.external_id == external_id)
    )).scalar_one_or_none()
    return row is not None


async def create_record(db: AsyncSession, *, doc_type: str, description: str, external_id: str) -> QrRecord:
    """Insert and flush a record inside the caller's transaction.

    Uniqueness is left to the database constraints; a concurrent writer for the
    same (type, external_id) gets the IntegrityError, which becomes DuplicateError.
    """
    obj = QrRecord(
        type=doc_type,
        description=description,
        external_id=external_id,
        public_id=str(uuid.uuid4()),
    )
    db.add(obj)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if await _pair_exists(db, doc_type, external_id):
            log.info("duplicate QR code for %s/%s", doc_type, external_id)
            raise DuplicateError("a QR code already exists for this type and id") from e
        log.error("insert into qrcodes failed: %s", e)
        raise InternalError("could not save QR code") from e
    except SQLAlchemyError as e:
        await db.rollback()
        log.error("insert into qrcodes failed: %s", e)
        raise InternalError("could not save QR code") from e
    return obj


async def issue_qrcode(db: AsyncSession, *, raw_type: object, description: object, external_id: object) -> IssuedQrCode:
    doc_type_in, desc, ext_id = _clean(raw_type), _clean(description), _clean(external_id)
    if not doc_type_in or not desc or not ext_id:
        raise ValidationError("missing fields: type, description and id are required")

    doc_type = canonical_type(doc_type_in)
    if doc_type is None:
        raise ValidationError("invalid type: use contratos, orcamentos or propostas")

    obj = await create_record(db, doc_type=doc_type, description=desc, external_id=ext_id)
    public_id = obj.public_id
    url = validation_url(public_id)

    # Record and image commit together: the row only becomes visible once its PNG exists.
    try:
        await write_qr_png(public_id, url)
    except Exception as e:
        await db.rollback()
        log.error("QR image generation failed for %s: %s", public_id, e)
        raise InternalError("could not generate QR image") from e

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        remove_qr_png(public_id)
        if await _pair_exists(db, doc_type, ext_id):
            log.info("duplicate QR code for %s/%s", doc_type, ext_id)
            raise DuplicateError("a QR code already exists for this type and id") from e
        raise InternalError("could not save QR code") from e
    except SQLAlchemyError as e:
        await db.rollback()
        remove_qr_png(public_id)
        log.error("commit of QR code %s failed: %s", public_id, e)
        raise InternalError("could not save QR code") from e

    await db.refresh(obj)
    log.info("issued QR code %s for %s/%s", obj.public_id, doc_type, ext_id)
    return IssuedQrCode(record=obj, validation_url=url, qr_image_url=qr_image_url(obj.public_id))


async def list_qrcodes(db: AsyncSession, *, doc_type: str | None = None, search: str | None = None) -> Sequence[QrRecord]:
    q = select(QrRecord)
    if doc_type:
        token = normalize_type(doc_type)
        q = q.where(QrRecord.type == (canonical_type(token) or token))
    if search:
        like = f"%{search}%"
        q = q.where(or_(
            QrRecord.description.like(like),
            QrRecord.external_id.like(like),
            QrRecord.public_id.like(like),
        ))
    q = q.order_by(QrRecord.id.desc()).limit(LIST_LIMIT)
    try:
        return (await db.execute(q)).scalars().all()
    except SQLAlchemyError as e:
        log.error("listing qrcodes failed: %s", e)
        raise InternalError("could not list QR codes") from e


async def get_by_public_id(db: AsyncSession, public_id: str) -> QrRecord:
    try:
        obj = (await db.execute(
            select(QrRecord).where(QrRecord.public_id == public_id)
        )).scalar_one_or_none()
    except SQLAlchemyError as e:
        log.error("lookup of %s failed: %s", public_id, e)
        raise InternalError("could not look up QR code") from e
    if obj is None:
        raise NotFoundError("document not found")
    return obj
