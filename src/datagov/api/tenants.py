"""Tenant API routes.

Learn: Listing and creating workspaces only needs a session — there is no
tenant yet to check membership against. Everything under
/tenants/{tenant_id} goes through the tenant guard first.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.dependencies import get_current_user
from datagov.auth.guard import TenantContext, require_permission
from datagov.auth.sessions import CurrentUser
from datagov.db.engine import get_db
from datagov.schemas.common import MessageResponse
from datagov.schemas.tenant import (
    TenantCreate,
    TenantListResponse,
    TenantRead,
    TenantResponse,
    TenantUpdate,
)
from datagov.services.tenant_service import TenantService

logger = structlog.get_logger()

router = APIRouter(prefix="/tenants")


def _svc(db: AsyncSession = Depends(get_db)) -> TenantService:
    return TenantService(db)


# ─── Collection ─────────────────────────────────────────

@router.get("", response_model=TenantListResponse)
async def list_tenants(
    user: CurrentUser = Depends(get_current_user),
    svc: TenantService = Depends(_svc),
):
    """Every workspace the caller belongs to, with their role in it."""
    memberships = await svc.list_for_user(user.id)
    return {
        "tenants": [
            {**TenantRead.model_validate(tenant).model_dump(), "role": role}
            for tenant, role in memberships
        ]
    }


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    body: TenantCreate,
    user: CurrentUser = Depends(get_current_user),
    svc: TenantService = Depends(_svc),
):
    tenant = await svc.create_tenant(
        owner_id=user.id, name=body.name, description=body.description
    )
    return {"tenant": tenant}


# ─── Single tenant ──────────────────────────────────────

@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    ctx: TenantContext = Depends(require_permission("tenant.read")),
    svc: TenantService = Depends(_svc),
):
    return {"tenant": await svc.get_tenant(ctx.tenant_id)}


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    body: TenantUpdate,
    ctx: TenantContext = Depends(require_permission("tenant.update")),
    svc: TenantService = Depends(_svc),
):
    tenant = await svc.update_tenant(ctx.tenant_id, body.model_dump(exclude_unset=True))
    return {"tenant": tenant}


@router.delete("/{tenant_id}", response_model=MessageResponse)
async def delete_tenant(
    ctx: TenantContext = Depends(require_permission("tenant.delete")),
    svc: TenantService = Depends(_svc),
):
    """Delete the workspace and everything in it."""
    await svc.delete_tenant(ctx.tenant_id)
    logger.info("tenant.deleted_by", tenant_id=str(ctx.tenant_id), user_id=str(ctx.user.id))
    return {"message": "Tenant deleted successfully"}
