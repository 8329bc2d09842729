"""Tenant access guard.

Learn: require_permission("dataset.delete") returns a FastAPI dependency.
FastAPI resolves dependencies before it validates the request body, so
the order on every tenant route is: session → guard → body validation →
handler. A caller with no membership gets 403 before we ever look at
their payload.

The guard checks, in order:
1. authenticated?                       → 401 Authentication required
2. tenant id present in the path?       → 400 Tenant ID is required
3. membership row for (tenant, user)?   → 403 Access denied to this workspace
4. membership role in the accepted set? → 403 Insufficient permissions

and hands the handler a TenantContext carrying the resolved role, so
role-dependent rules ("cannot remove owner") need no second lookup.
"""

import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.dependencies import get_current_user_optional
from datagov.auth.roles import allowed_roles
from datagov.auth.sessions import CurrentUser
from datagov.db.engine import get_db
from datagov.db.models import TenantMember
from datagov.errors import BadRequest, Forbidden, Unauthorized


@dataclass(frozen=True)
class TenantContext:
    """Who is calling, in which workspace, with which role."""

    tenant_id: uuid.UUID
    user: CurrentUser
    role: str


def _parse_tenant_id(raw: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def require_permission(permission: str) -> Callable:
    """Build the guard dependency for one operation of the permission table."""
    roles = allowed_roles(permission)

    async def tenant_guard(
        request: Request,
        user: Optional[CurrentUser] = Depends(get_current_user_optional),
        db: AsyncSession = Depends(get_db),
    ) -> TenantContext:
        if user is None:
            raise Unauthorized()

        raw_tenant_id = request.path_params.get("tenant_id")
        if not raw_tenant_id:
            raise BadRequest("Tenant ID is required")

        # A malformed id can't match a membership row, so it gets the stranger's answer
        tenant_id = _parse_tenant_id(raw_tenant_id)
        membership = None
        if tenant_id is not None:
            result = await db.execute(
                select(TenantMember)
                .where(
                    TenantMember.tenant_id == tenant_id,
                    TenantMember.user_id == user.id,
                )
                .limit(1)
            )
            membership = result.scalars().first()

        if membership is None:
            raise Forbidden("Access denied to this workspace")
        if membership.role not in roles:
            raise Forbidden("Insufficient permissions")

        return TenantContext(tenant_id=tenant_id, user=user, role=membership.role)

    tenant_guard.__qualname__ = f"tenant_guard[{permission}]"
    return tenant_guard
