"""Pydantic schemas for tenant members and invitations."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr

from datagov.schemas.common import ApiModel

# Ownership is never granted through the members API.
AssignableRole = Literal["admin", "member"]


class InviteRequest(ApiModel):
    email: EmailStr
    role: AssignableRole


class RoleChange(ApiModel):
    role: AssignableRole


class MemberUser(ApiModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: str
    created_at: datetime


class MemberRead(ApiModel):
    id: uuid.UUID
    role: str
    user: MemberUser
    created_at: datetime


class MemberListResponse(ApiModel):
    members: list[MemberRead]


class MembershipRead(ApiModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    created_at: datetime
    updated_at: datetime


class MembershipResponse(ApiModel):
    member: MembershipRead


class InviteResponse(ApiModel):
    """`token` is only present when an invitation (not a membership) was created."""
    message: str
    token: Optional[str] = None
