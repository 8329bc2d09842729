"""API key tests — the full key is shown once, then only redacted."""

import uuid

import pytest

from datagov.schemas.api_key import KEY_WARNING
from datagov.utils import redact_key


def _url(tenant_id: str, suffix: str = "") -> str:
    return f"/api/tenants/{tenant_id}/api-keys{suffix}"


@pytest.mark.asyncio
async def test_create_returns_full_key_once(workspace):
    r = await workspace.admin.client.post(_url(workspace.tenant_id), json={"name": "CI"})
    assert r.status_code == 201
    created = r.json()["apiKey"]
    key = created["key"]
    assert key.startswith("dgk_")
    assert len(key) == 4 + 64
    assert created["warning"] == KEY_WARNING
    assert created["name"] == "CI"
    assert created["createdBy"] == workspace.admin.user["id"]

    r = await workspace.owner.client.get(_url(workspace.tenant_id))
    assert r.status_code == 200
    assert key not in r.text
    [listed] = r.json()["apiKeys"]
    assert listed["id"] == created["id"]
    assert listed["key"] == redact_key(key)
    assert listed["key"] == f"{key[:8]}...{key[-4:]}"
    assert listed["creator"]["email"] == workspace.admin.email


@pytest.mark.asyncio
async def test_create_with_expiry(workspace):
    r = await workspace.owner.client.post(
        _url(workspace.tenant_id),
        json={"name": "temp", "expiresAt": "2030-01-01T00:00:00Z"},
    )
    assert r.status_code == 201
    assert r.json()["apiKey"]["expiresAt"].startswith("2030-01-01T00:00:00")


@pytest.mark.asyncio
async def test_create_with_bad_expiry(workspace):
    r = await workspace.owner.client.post(
        _url(workspace.tenant_id), json={"name": "temp", "expiresAt": "next tuesday"}
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "expiresAt"


@pytest.mark.asyncio
async def test_keys_are_unique(workspace):
    keys = set()
    for i in range(3):
        r = await workspace.owner.client.post(_url(workspace.tenant_id), json={"name": f"k{i}"})
        keys.add(r.json()["apiKey"]["key"])
    assert len(keys) == 3


@pytest.mark.asyncio
async def test_member_cannot_manage_keys(workspace):
    assert (await workspace.member.client.get(_url(workspace.tenant_id))).status_code == 403
    r = await workspace.member.client.post(_url(workspace.tenant_id), json={"name": "sneaky"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_revoke_key(workspace):
    r = await workspace.owner.client.post(_url(workspace.tenant_id), json={"name": "old"})
    key_id = r.json()["apiKey"]["id"]

    r = await workspace.admin.client.delete(_url(workspace.tenant_id, f"/{key_id}"))
    assert r.status_code == 200
    assert r.json() == {"message": "API key revoked successfully"}

    assert (await workspace.owner.client.get(_url(workspace.tenant_id))).json()["apiKeys"] == []

    r = await workspace.admin.client.delete(_url(workspace.tenant_id, f"/{key_id}"))
    assert r.status_code == 404
    assert r.json() == {"error": "API key not found"}


@pytest.mark.asyncio
async def test_revoke_other_tenants_key(workspace):
    r = await workspace.owner.client.post(_url(workspace.tenant_id), json={"name": "mine"})
    key_id = r.json()["apiKey"]["id"]

    other = workspace.outsider
    r = await other.client.delete(_url(other.tenant_id, f"/{key_id}"))
    assert r.status_code == 404

    r = await other.client.delete(_url(other.tenant_id, f"/{uuid.uuid4()}"))
    assert r.status_code == 404
