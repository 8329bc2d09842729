"""Tenant API tests — listing, creation, update, deletion, isolation."""

import uuid

import pytest
from sqlalchemy import func, select

from datagov.db.models import Dataset, TenantMember


@pytest.mark.asyncio
async def test_list_tenants_requires_session(client):
    r = await client.get("/api/tenants")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_create_tenant_makes_creator_owner(signup):
    account = await signup("creator")
    r = await account.client.post(
        "/api/tenants", json={"name": "Data Platform Team", "description": "ETL"}
    )
    assert r.status_code == 201
    tenant = r.json()["tenant"]
    assert tenant["name"] == "Data Platform Team"
    assert tenant["slug"] == "data-platform-team"
    assert tenant["description"] == "ETL"
    assert "createdAt" in tenant and "updatedAt" in tenant

    r = await account.client.get("/api/tenants")
    listed = r.json()["tenants"]
    assert [(t["id"], t["slug"], t["role"]) for t in listed] == [
        (tenant["id"], "data-platform-team", "owner")
    ]


@pytest.mark.asyncio
async def test_list_shows_role_per_tenant(workspace):
    r = await workspace.member.client.get("/api/tenants")
    tenants = r.json()["tenants"]
    assert [(t["id"], t["role"]) for t in tenants] == [(workspace.tenant_id, "member")]


@pytest.mark.asyncio
async def test_create_tenant_validation(signup):
    account = await signup()
    r = await account.client.post("/api/tenants", json={"name": ""})
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "name"


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(signup):
    account = await signup()
    assert (await account.client.post("/api/tenants", json={"name": "Same"})).status_code == 201
    r = await account.client.post("/api/tenants", json={"name": "same!"})
    assert r.status_code == 409
    assert r.json() == {"error": "Resource already exists"}


@pytest.mark.asyncio
async def test_get_tenant(workspace):
    r = await workspace.member.client.get(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 200
    assert r.json()["tenant"]["id"] == workspace.tenant_id


@pytest.mark.asyncio
async def test_get_tenant_as_stranger(workspace):
    r = await workspace.outsider.client.get(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 403
    assert r.json() == {"error": "Access denied to this workspace"}


@pytest.mark.asyncio
async def test_get_tenant_malformed_id(workspace):
    r = await workspace.owner.client.get("/api/tenants/not-a-uuid")
    assert r.status_code == 403
    assert r.json() == {"error": "Access denied to this workspace"}


@pytest.mark.asyncio
async def test_get_tenant_unauthenticated(client, workspace):
    r = await client.get(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}


@pytest.mark.asyncio
async def test_rename_regenerates_slug(workspace):
    r = await workspace.admin.client.patch(
        f"/api/tenants/{workspace.tenant_id}", json={"name": "Renamed Space"}
    )
    assert r.status_code == 200
    tenant = r.json()["tenant"]
    assert tenant["name"] == "Renamed Space"
    assert tenant["slug"] == "renamed-space"


@pytest.mark.asyncio
async def test_update_description_keeps_name(workspace):
    before = (await workspace.owner.client.get(f"/api/tenants/{workspace.tenant_id}")).json()
    r = await workspace.owner.client.patch(
        f"/api/tenants/{workspace.tenant_id}", json={"description": "new words"}
    )
    tenant = r.json()["tenant"]
    assert tenant["description"] == "new words"
    assert tenant["name"] == before["tenant"]["name"]
    assert tenant["slug"] == before["tenant"]["slug"]


@pytest.mark.asyncio
async def test_member_cannot_update_tenant(workspace):
    r = await workspace.member.client.patch(
        f"/api/tenants/{workspace.tenant_id}", json={"name": "Mine Now"}
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Insufficient permissions"}


@pytest.mark.asyncio
async def test_admin_cannot_delete_tenant(workspace):
    r = await workspace.admin.client.delete(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_delete_tenant_cascades(workspace, db_session):
    tenant_id = workspace.tenant_id
    r = await workspace.member.client.post(
        f"/api/tenants/{tenant_id}/datasets", json={"name": "doomed"}
    )
    assert r.status_code == 201

    r = await workspace.owner.client.delete(f"/api/tenants/{tenant_id}")
    assert r.status_code == 200
    assert r.json() == {"message": "Tenant deleted successfully"}

    tid = uuid.UUID(tenant_id)
    members = await db_session.scalar(
        select(func.count()).select_from(TenantMember).where(TenantMember.tenant_id == tid)
    )
    datasets = await db_session.scalar(
        select(func.count()).select_from(Dataset).where(Dataset.tenant_id == tid)
    )
    assert members == 0
    assert datasets == 0

    # Membership went with the tenant, so the guard now says "no access"
    r = await workspace.owner.client.get(f"/api/tenants/{tenant_id}")
    assert r.status_code == 403
