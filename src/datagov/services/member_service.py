"""Member service — memberships, invitations, role changes.

Learn: Inviting an email has three outcomes:
- the user exists and is already a member → 409
- the user exists but isn't a member      → membership added right away
- nobody has that email yet               → invitation row with a one-time
  token and an expiry; the invitee gets no access until a membership
  exists (redeeming invitations is not implemented)

Owners are protected twice: they can't be removed through this API, and
the last owner of a tenant can't be demoted.
"""

import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from datagov.auth.roles import OWNER
from datagov.config import settings
from datagov.db.models import Invitation, TenantMember, User, utcnow
from datagov.errors import Conflict, Forbidden, NotFound
from datagov.utils import generate_invitation_token

logger = structlog.get_logger()


def owner_rows_query(tenant_id: uuid.UUID):
    """Owner rows of a tenant, locked until commit on Postgres.

    Two concurrent demotions both wait on these rows, so the second one
    recounts after the first commits and sees the last owner.
    SQLite drops FOR UPDATE and serializes writers instead.
    """
    return (
        select(TenantMember.id)
        .where(TenantMember.tenant_id == tenant_id, TenantMember.role == OWNER)
        .with_for_update()
    )


@dataclass
class InviteOutcome:
    message: str
    token: Optional[str] = None


class MemberService:
    """Business logic for tenant membership."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_members(self, tenant_id: uuid.UUID) -> list[TenantMember]:
        result = await self.db.execute(
            select(TenantMember)
            .where(TenantMember.tenant_id == tenant_id)
            .options(selectinload(TenantMember.user))
            .order_by(TenantMember.created_at)
        )
        return list(result.scalars().all())

    async def get_membership(
        self, tenant_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[TenantMember]:
        result = await self.db.execute(
            select(TenantMember).where(
                TenantMember.tenant_id == tenant_id,
                TenantMember.user_id == user_id,
            )
        )
        return result.scalars().first()

    async def invite(
        self,
        tenant_id: uuid.UUID,
        invited_by: uuid.UUID,
        email: str,
        role: str,
    ) -> InviteOutcome:
        email = email.lower()
        result = await self.db.execute(select(User).where(User.email == email))
        existing_user = result.scalars().first()

        if existing_user:
            if await self.get_membership(tenant_id, existing_user.id):
                raise Conflict("User is already a member")

            self.db.add(TenantMember(tenant_id=tenant_id, user_id=existing_user.id, role=role))
            await self.db.commit()
            logger.info(
                "member.added",
                tenant_id=str(tenant_id),
                user_id=str(existing_user.id),
                role=role,
            )
            return InviteOutcome(message="User added to workspace")

        invitation = Invitation(
            tenant_id=tenant_id,
            email=email,
            role=role,
            token=generate_invitation_token(),
            expires_at=utcnow() + timedelta(days=settings.invitation_expire_days),
            invited_by=invited_by,
        )
        self.db.add(invitation)
        await self.db.commit()
        logger.info("member.invited", tenant_id=str(tenant_id), invitation_id=str(invitation.id))
        return InviteOutcome(message="Invitation sent", token=invitation.token)

    async def remove_member(self, tenant_id: uuid.UUID, user_id: uuid.UUID) -> None:
        member = await self.get_membership(tenant_id, user_id)
        if not member:
            raise NotFound("Member not found")
        if member.role == OWNER:
            raise Forbidden("Cannot remove owner")

        await self.db.execute(
            delete(TenantMember).where(
                TenantMember.tenant_id == tenant_id,
                TenantMember.user_id == user_id,
            )
        )
        await self.db.commit()
        logger.info("member.removed", tenant_id=str(tenant_id), user_id=str(user_id))

    async def change_role(
        self, tenant_id: uuid.UUID, user_id: uuid.UUID, role: str
    ) -> TenantMember:
        member = await self.get_membership(tenant_id, user_id)
        if not member:
            raise NotFound("Member not found")

        if member.role == OWNER and role != OWNER:
            if await self._count_owners(tenant_id) <= 1:
                raise Conflict("A workspace must keep at least one owner")

        member.role = role
        member.updated_at = utcnow()
        await self.db.commit()
        logger.info(
            "member.role_changed", tenant_id=str(tenant_id), user_id=str(user_id), role=role
        )
        return member

    async def _count_owners(self, tenant_id: uuid.UUID) -> int:
        result = await self.db.execute(owner_rows_query(tenant_id))
        return len(result.scalars().all())
