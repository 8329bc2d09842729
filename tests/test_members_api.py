"""Member API tests — invitations, removal, role changes, owner protection."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from datagov.db.models import Invitation
from datagov.services.member_service import owner_rows_query


def _url(tenant_id: str, suffix: str = "") -> str:
    return f"/api/tenants/{tenant_id}/members{suffix}"


@pytest.mark.asyncio
async def test_list_members_shape(workspace):
    r = await workspace.member.client.get(_url(workspace.tenant_id))
    assert r.status_code == 200
    members = r.json()["members"]
    assert {m["role"] for m in members} == {"owner", "admin", "member"}

    owner = next(m for m in members if m["role"] == "owner")
    assert set(owner) == {"id", "role", "user", "createdAt"}
    assert set(owner["user"]) == {"id", "name", "email", "createdAt"}
    assert owner["user"]["email"] == workspace.owner.email


@pytest.mark.asyncio
async def test_invite_existing_user_adds_membership(workspace, signup):
    newcomer = await signup("newcomer")
    r = await workspace.admin.client.post(
        _url(workspace.tenant_id), json={"email": newcomer.email, "role": "member"}
    )
    # POST to the collection isn't a route; inviting has its own path
    assert r.status_code == 405

    r = await workspace.admin.client.post(
        _url(workspace.tenant_id, "/invite"), json={"email": newcomer.email, "role": "admin"}
    )
    assert r.status_code == 200
    assert r.json() == {"message": "User added to workspace"}

    r = await newcomer.client.get("/api/tenants")
    assert [(t["id"], t["role"]) for t in r.json()["tenants"]] == [(workspace.tenant_id, "admin")]


@pytest.mark.asyncio
async def test_invite_existing_member_conflicts(workspace):
    r = await workspace.owner.client.post(
        _url(workspace.tenant_id, "/invite"),
        json={"email": workspace.member.email, "role": "member"},
    )
    assert r.status_code == 409
    assert r.json() == {"error": "User is already a member"}


@pytest.mark.asyncio
async def test_invite_unknown_email_creates_invitation(workspace, signup, db_session):
    email = f"future-{uuid.uuid4().hex[:8]}@example.com"
    r = await workspace.owner.client.post(
        _url(workspace.tenant_id, "/invite"), json={"email": email, "role": "member"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Invitation sent"
    assert len(body["token"]) == 64

    invitation = (
        await db_session.execute(select(Invitation).where(Invitation.email == email))
    ).scalar_one()
    assert invitation.token == body["token"]
    assert invitation.role == "member"
    expires_at = invitation.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    remaining = expires_at - datetime.now(timezone.utc)
    assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)


@pytest.mark.asyncio
async def test_invitee_has_no_access_until_membership_exists(workspace, make_client):
    email = f"later-{uuid.uuid4().hex[:8]}@example.com"
    await workspace.owner.client.post(
        _url(workspace.tenant_id, "/invite"), json={"email": email, "role": "admin"}
    )

    c = make_client()
    r = await c.post("/api/auth/register", json={"email": email, "password": "secret123"})
    assert r.status_code == 200
    assert (await c.get("/api/tenants")).json()["tenants"] == []
    assert (await c.get(f"/api/tenants/{workspace.tenant_id}")).status_code == 403


@pytest.mark.asyncio
async def test_invite_cannot_grant_owner(workspace):
    r = await workspace.owner.client.post(
        _url(workspace.tenant_id, "/invite"),
        json={"email": "boss@example.com", "role": "owner"},
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "role"


@pytest.mark.asyncio
async def test_member_cannot_invite(workspace):
    r = await workspace.member.client.post(
        _url(workspace.tenant_id, "/invite"),
        json={"email": "friend@example.com", "role": "member"},
    )
    assert r.status_code == 403


# ═══════════════════════════════════════════════════════════
# Removal
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_remove_member(workspace):
    r = await workspace.admin.client.delete(
        _url(workspace.tenant_id, f"/{workspace.member.user['id']}")
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Member removed successfully"}

    r = await workspace.member.client.get(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_remove_unknown_member(workspace):
    r = await workspace.owner.client.delete(_url(workspace.tenant_id, f"/{uuid.uuid4()}"))
    assert r.status_code == 404
    assert r.json() == {"error": "Member not found"}


@pytest.mark.asyncio
async def test_cannot_remove_owner(workspace):
    r = await workspace.admin.client.delete(
        _url(workspace.tenant_id, f"/{workspace.owner.user['id']}")
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Cannot remove owner"}


# ═══════════════════════════════════════════════════════════
# Role changes
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_owner_promotes_member(workspace):
    r = await workspace.owner.client.patch(
        _url(workspace.tenant_id, f"/{workspace.member.user['id']}/role"), json={"role": "admin"}
    )
    assert r.status_code == 200
    member = r.json()["member"]
    assert member["role"] == "admin"
    assert member["userId"] == workspace.member.user["id"]
    assert member["tenantId"] == workspace.tenant_id

    # The new role takes effect on the very next request
    r = await workspace.member.client.get(f"/api/tenants/{workspace.tenant_id}/api-keys")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_admin_cannot_change_roles(workspace):
    r = await workspace.admin.client.patch(
        _url(workspace.tenant_id, f"/{workspace.member.user['id']}/role"), json={"role": "admin"}
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_change_role_unknown_member(workspace):
    r = await workspace.owner.client.patch(
        _url(workspace.tenant_id, f"/{uuid.uuid4()}/role"), json={"role": "admin"}
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_last_owner_cannot_be_demoted(workspace):
    r = await workspace.owner.client.patch(
        _url(workspace.tenant_id, f"/{workspace.owner.user['id']}/role"), json={"role": "admin"}
    )
    assert r.status_code == 409
    assert r.json() == {"error": "A workspace must keep at least one owner"}


@pytest.mark.asyncio
async def test_two_owners_one_demotes_the_other(workspace, make_owner):
    await make_owner(workspace.admin)
    second_owner = workspace.admin

    r = await workspace.owner.client.patch(
        _url(workspace.tenant_id, f"/{second_owner.user['id']}/role"), json={"role": "member"}
    )
    assert r.status_code == 200
    assert r.json()["member"]["role"] == "member"

    r = await workspace.owner.client.delete(f"/api/tenants/{workspace.tenant_id}")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_demotions_stop_at_the_last_owner(workspace, make_owner):
    await make_owner(workspace.admin)

    r = await workspace.admin.client.patch(
        _url(workspace.tenant_id, f"/{workspace.owner.user['id']}/role"), json={"role": "admin"}
    )
    assert r.status_code == 200

    r = await workspace.owner.client.patch(
        _url(workspace.tenant_id, f"/{workspace.admin.user['id']}/role"), json={"role": "member"}
    )
    assert r.status_code == 403

    r = await workspace.admin.client.patch(
        _url(workspace.tenant_id, f"/{workspace.admin.user['id']}/role"), json={"role": "member"}
    )
    assert r.status_code == 409
    assert r.json() == {"error": "A workspace must keep at least one owner"}


def test_owner_count_locks_rows_on_postgres():
    """Concurrent demotions serialize on the owner rows before counting."""
    query = owner_rows_query(uuid.uuid4())
    assert "FOR UPDATE" in str(query.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" not in str(query.compile(dialect=sqlite.dialect()))
