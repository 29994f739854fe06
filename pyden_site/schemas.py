from __future__ import annotations
from datetime import datetime, timezone
from pydantic import BaseModel, Field

from .models import QrRecord, User

# Inputs are optional at the schema level; blank/missing fields are rejected
# by the services with a 400 rather than a pydantic 422.

class QrCodeCreate(BaseModel):
    type: str | None = None
    description: str | None = None
    id: str | int | None = None  # caller's business id (externalId)

class QrCodeRead(BaseModel):
    id: int
    type: str
    description: str
    external_id: str
    public_id: str
    created_at: datetime

    @classmethod
    def from_record(cls, r: QrRecord) -> "QrCodeRead":
        created = r.created_at
        if created is not None and created.tzinfo is None:
            # sqlite hands back naive datetimes; they were written as UTC
            created = created.replace(tzinfo=timezone.utc)
        return cls(
            id=r.id, type=r.type, description=r.description,
            external_id=r.external_id, public_id=r.public_id, created_at=created,
        )

class QrCodeIssued(BaseModel):
    record: QrCodeRead
    validation_url: str
    qr_image_url: str

class QrCodeList(BaseModel):
    data: list[QrCodeRead] = Field(default_factory=list)


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None

class UserRead(BaseModel):
    id: int
    email: str
    role: str

    @classmethod
    def from_user(cls, u: User) -> "UserRead":
        return cls(id=u.id, email=u.email, role=u.role)

class LoginResponse(BaseModel):
    user: UserRead
    expires_at: datetime


class ContactRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    project: str | None = None
    subject: str | None = None
    message: str | None = None

class ContactResponse(BaseModel):
    message: str
