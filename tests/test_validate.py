import uuid

import pytest

pytestmark = pytest.mark.anyio


async def _issue(client, **payload):
    r = await client.post("/qrcodes", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


async def test_validate_shows_record_without_session(admin_client):
    issued = await _issue(admin_client, type="Orçamentos", description="Orçamento de obra", id="O-77")
    public_id = issued["record"]["public_id"]

    await admin_client.post("/admin/logout")
    r = await admin_client.get(f"/validate/{public_id}")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    html = r.text
    assert "orcamentos" in html
    assert "O-77" in html
    assert "Orçamento de obra" in html
    assert f"/img/qrcodes/{public_id}.png" in html


async def test_validation_url_from_issue_resolves(admin_client):
    issued = await _issue(admin_client, type="propostas", description="Proposta", id="P-1")
    path = issued["validation_url"].replace("http://testserver", "")
    r = await admin_client.get(path)
    assert r.status_code == 200
    assert "P-1" in r.text


@pytest.mark.parametrize("public_id", [str(uuid.uuid4()), "not-a-uuid", "x" * 300])
async def test_unknown_public_id_is_404_page(client, public_id):
    r = await client.get(f"/validate/{public_id}")
    assert r.status_code == 404
    assert r.headers["content-type"].startswith("text/html")
    assert "não encontrado" in r.text


async def test_record_fields_are_escaped(admin_client):
    issued = await _issue(admin_client, type="contratos", description="<script>alert(1)</script>", id="<b>1</b>")
    r = await admin_client.get(f"/validate/{issued['record']['public_id']}")
    assert "<script>alert(1)</script>" not in r.text
    assert "&lt;script&gt;" in r.text


async def test_pages_carry_hardening_headers(admin_client):
    issued = await _issue(admin_client, type="contratos", description="d", id="H-1")
    found = await admin_client.get(f"/validate/{issued['record']['public_id']}")
    missing = await admin_client.get(f"/validate/{uuid.uuid4()}")
    assert (found.status_code, missing.status_code) == (200, 404)
    for r in (found, missing):
        assert r.headers["x-content-type-options"] == "nosniff"
        assert r.headers["x-frame-options"] == "SAMEORIGIN"
        assert r.headers["referrer-policy"] == "no-referrer"
        assert "max-age=" in r.headers["strict-transport-security"]
