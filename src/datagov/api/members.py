"""Member API routes — list, invite, remove, change role.

Learn: Who may do what comes from the permission table (inviting and
removing are owner/admin, changing roles is owner only). What may be done
to whom — owners can't be removed, the last owner can't be demoted —
lives in MemberService.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.guard import TenantContext, require_permission
from datagov.db.engine import get_db
from datagov.schemas.common import MessageResponse
from datagov.schemas.member import (
    InviteRequest,
    InviteResponse,
    MemberListResponse,
    MembershipResponse,
    RoleChange,
)
from datagov.services.member_service import MemberService

router = APIRouter(prefix="/tenants/{tenant_id}/members")


def _svc(db: AsyncSession = Depends(get_db)) -> MemberService:
    return MemberService(db)


@router.get("", response_model=MemberListResponse)
async def list_members(
    ctx: TenantContext = Depends(require_permission("member.list")),
    svc: MemberService = Depends(_svc),
):
    return {"members": await svc.list_members(ctx.tenant_id)}


@router.post("/invite", response_model=InviteResponse, response_model_exclude_none=True)
async def invite_member(
    body: InviteRequest,
    ctx: TenantContext = Depends(require_permission("member.invite")),
    svc: MemberService = Depends(_svc),
):
    """Add an existing user right away, or create an invitation for a new email."""
    outcome = await svc.invite(
        tenant_id=ctx.tenant_id,
        invited_by=ctx.user.id,
        email=body.email,
        role=body.role,
    )
    return {"message": outcome.message, "token": outcome.token}


@router.delete("/{user_id}", response_model=MessageResponse)
async def remove_member(
    user_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("member.remove")),
    svc: MemberService = Depends(_svc),
):
    await svc.remove_member(ctx.tenant_id, user_id)
    return {"message": "Member removed successfully"}


@router.patch("/{user_id}/role", response_model=MembershipResponse)
async def change_role(
    user_id: uuid.UUID,
    body: RoleChange,
    ctx: TenantContext = Depends(require_permission("member.change_role")),
    svc: MemberService = Depends(_svc),
):
    return {"member": await svc.change_role(ctx.tenant_id, user_id, body.role)}
