from __future__ import annotations
from email.message import EmailMessage
from email.utils import formataddr
from html import escape

from aiosmtplib import SMTPException

from ..core.errors import InternalError, ValidationError
from ..core.logging import get_logger
from ..core.mailer import Mailer
from ..schemas import ContactRequest

REQUIRED_FIELDS = ("name", "email", "phone", "subject", "message")

log = get_logger("contact")


def _clean(value: str | None) -> str:
    return (value or "").strip()


def build_contact_message(form: ContactRequest, *, mailbox: str) -> EmailMessage:
    name, email, phone = _clean(form.name), _clean(form.email), _clean(form.phone)
    project, subject, message = _clean(form.project), _clean(form.subject), _clean(form.message)

    msg = EmailMessage()
    msg["From"] = formataddr((name, mailbox))
    msg["Reply-To"] = email
    msg["To"] = mailbox
    msg["Subject"] = subject
    msg.set_content(
        "You received a new message from the contact form:\n\n"
        f"Name: {name}\n"
        f"Email: {email}\n"
        f"Phone: {phone}\n"
        f"Project: {project}\n"
        f"Subject: {subject}\n\n"
        f"Message:\n{message}\n"
    )
    msg.add_alternative(
        "<p>You received a new message from the contact form:</p>"
        "<ul>"
        f"<li><strong>Name:</strong> {escape(name)}</li>"
        f"<li><strong>Email:</strong> {escape(email)}</li>"
        f"<li><strong>Phone:</strong> {escape(phone)}</li>"
        f"<li><strong>Project:</strong> {escape(project)}</li>"
        f"<li><strong>Subject:</strong> {escape(subject)}</li>"
        "</ul>"
        "<p><strong>Message:</strong></p>"
        f"<p>{escape(message)}</p>",
        subtype="html",
    )
    return msg


async def relay_contact(mailer: Mailer, form: ContactRequest) -> str:
    missing = [f for f in REQUIRED_FIELDS if not _clean(getattr(form, f))]
    if missing:
        raise ValidationError("please fill in all required fields: " + ", ".join(missing))

    try:
        msg = build_contact_message(form, mailbox=mailer.mailbox)
    except ValueError as e:
        # line breaks in header fields (name, email, subject)
        raise ValidationError("invalid characters in contact fields") from e
    try:
        response = await mailer.send(msg)
    except (SMTPException, OSError) as e:
        log.error("contact relay failed for %s: %s", _clean(form.email), e)
        raise InternalError("could not send message, try again later") from e
    log.info("contact message relayed for %s: %s", _clean(form.email), response)
    return response
