from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from pyden_site.core.errors import AuthError, ValidationError
from pyden_site.core.security import hash_session_token
from pyden_site.db import async_session_maker
from pyden_site.models import AdminSession, User
from pyden_site.services import auth_service

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD

pytestmark = pytest.mark.anyio


async def test_login_sets_session_cookie(client, admin_user):
    r = await client.post("/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == ADMIN_EMAIL
    cookie = r.headers["set-cookie"]
    assert "pyden_session=" in cookie
    assert "HttpOnly" in cookie
    assert "Max-Age=28800" in cookie

    me = await client.get("/admin/me")
    assert me.status_code == 200
    assert me.json()["email"] == ADMIN_EMAIL


async def test_email_is_case_insensitive(client, admin_user):
    r = await client.post("/admin/login", json={"email": "  ADMIN@pyden.tech ", "password": ADMIN_PASSWORD})
    assert r.status_code == 200


@pytest.mark.parametrize("email, password", [
    (ADMIN_EMAIL, "wrong"),
    ("nobody@pyden.tech", ADMIN_PASSWORD),
])
async def test_bad_credentials_are_401(client, admin_user, email, password):
    r = await client.post("/admin/login", json={"email": email, "password": password})
    assert r.status_code == 401
    assert "set-cookie" not in r.headers


async def test_missing_credentials_are_400(client, admin_user):
    r = await client.post("/admin/login", json={"email": ADMIN_EMAIL})
    assert r.status_code == 400


async def test_logout_ends_session(admin_client):
    assert (await admin_client.get("/admin/me")).status_code == 200
    r = await admin_client.post("/admin/logout")
    assert r.status_code == 204
    assert (await admin_client.get("/admin/me")).status_code == 401
    assert (await admin_client.get("/qrcodes")).status_code == 401
    # idempotent
    assert (await admin_client.post("/admin/logout")).status_code == 204


async def test_session_expires_after_window(db, admin_user):
    user, raw, expires_at = await auth_service.login(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
    assert timedelta(hours=7, minutes=59) < expires_at - datetime.now(timezone.utc) <= timedelta(hours=8)
    assert (await auth_service.resolve_session(db, raw)).id == user.id

    await db.execute(
        update(AdminSession)
        .where(AdminSession.token_hash == hash_session_token(raw))
        .values(expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
    )
    await db.commit()
    with pytest.raises(AuthError):
        await auth_service.resolve_session(db, raw)


async def test_only_token_hash_is_stored(db, admin_user):
    _, raw, _ = await auth_service.login(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
    hashes = (await db.execute(select(AdminSession.token_hash))).scalars().all()
    assert raw not in hashes
    assert hash_session_token(raw) in hashes


async def test_inactive_user_cannot_log_in(db, admin_user):
    await db.execute(update(User).values(is_active=False))
    await db.commit()
    with pytest.raises(AuthError):
        await auth_service.login(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)


async def test_login_requires_both_fields(db):
    with pytest.raises(ValidationError):
        await auth_service.login(db, email="", password="x")


async def test_ensure_admin_seeds_once(reset_db):
    async with async_session_maker() as db:
        assert await auth_service.ensure_admin(db, email=None, password=None) is None
        first = await auth_service.ensure_admin(db, email="Boss@pyden.tech", password="pw-123456")
        again = await auth_service.ensure_admin(db, email="boss@pyden.tech", password="other")
        assert first.id == again.id
        assert first.email == "boss@pyden.tech"
        count = len((await db.execute(select(User))).scalars().all())
        assert count == 1
