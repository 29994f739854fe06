# tests/conftest.py
"""
Test bootstrap.

Environment is seeded before the app is imported: settings, the engine and
the QR image directory are resolved at import time.

- SQLite database and QR images live in a throwaway temp dir
- Redis rate limiting is off (tests that need it patch the client)
- the SMTP mailer is swapped for an in-memory fake
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="pyden-site-tests-"))


def _ensure_test_env() -> None:
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.sqlite3'}"
    os.environ["QR_IMAGE_DIR"] = str(_TMP / "qrcodes")
    os.environ["BASE_URL"] = "http://testserver/"
    os.environ["RL_ENABLED"] = "false"
    os.environ["EMAIL_USER"] = "site@example.com"
    os.environ.pop("ADMIN_EMAIL", None)
    os.environ.pop("ADMIN_PASSWORD", None)


_ensure_test_env()

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from pyden_site.db import async_session_maker, engine  # noqa: E402
from pyden_site.deps import get_mailer  # noqa: E402
from pyden_site.main import app  # noqa: E402
from pyden_site.models import Base  # noqa: E402
from pyden_site.services import auth_service  # noqa: E402

ADMIN_EMAIL = "admin@pyden.tech"
ADMIN_PASSWORD = "s3cret-Passw0rd"


class FakeMailer:
    """Collects messages instead of talking SMTP."""

    def __init__(self, mailbox: str = "site@example.com", fail_with: Exception | None = None):
        self.mailbox = mailbox
        self.fail_with = fail_with
        self.sent = []

    async def send(self, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return "250 OK"


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def qr_dir() -> Path:
    return Path(os.environ["QR_IMAGE_DIR"])


@pytest.fixture
async def reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # pooled aiosqlite connections are bound to this test's event loop
    await engine.dispose()


@pytest.fixture
async def db(reset_db):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def admin_user(reset_db):
    async with async_session_maker() as session:
        return await auth_service.create_user(session, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)


@pytest.fixture
def mailer():
    fake = FakeMailer()
    app.dependency_overrides[get_mailer] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture
async def client(reset_db, mailer):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def admin_client(client, admin_user):
    r = await client.post("/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return client
