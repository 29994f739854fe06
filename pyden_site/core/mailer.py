# pyden_site/core/mailer.py
from __future__ import annotations
from email.message import EmailMessage

import aiosmtplib

from .config import Settings, get_settings


class Mailer:
    """Thin async SMTP relay. One instance per process, created in the app lifespan."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def mailbox(self) -> str:
        return self.settings.email_user

    async def send(self, message: EmailMessage) -> str:
        s = self.settings
        implicit_tls = s.email_port == 465
        _, response = await aiosmtplib.send(
            message,
            hostname=s.email_host,
            port=s.email_port,
            username=s.email_user or None,
            password=s.email_pass or None,
            use_tls=implicit_tls,
            start_tls=False if implicit_tls else None,
            timeout=s.email_timeout_seconds,
        )
        return response
