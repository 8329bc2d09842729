"""API key routes.

Learn: The create response is the only place the full key appears. The
list response is built from redact_key() values, never from the raw
column.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.guard import TenantContext, require_permission
from datagov.db.engine import get_db
from datagov.schemas.api_key import (
    ApiKeyCreate,
    ApiKeyCreatedResponse,
    ApiKeyListResponse,
)
from datagov.schemas.common import MessageResponse
from datagov.services.api_key_service import ApiKeyService
from datagov.utils import redact_key

router = APIRouter(prefix="/tenants/{tenant_id}/api-keys")


def _svc(db: AsyncSession = Depends(get_db)) -> ApiKeyService:
    return ApiKeyService(db)


@router.get("", response_model=ApiKeyListResponse)
async def list_api_keys(
    ctx: TenantContext = Depends(require_permission("api_key.list")),
    svc: ApiKeyService = Depends(_svc),
):
    keys = await svc.list_keys(ctx.tenant_id)
    return {
        "api_keys": [
            {
                "id": k.id,
                "tenant_id": k.tenant_id,
                "name": k.name,
                "key": redact_key(k.key),
                "last_used_at": k.last_used_at,
                "expires_at": k.expires_at,
                "created_by": k.created_by,
                "created_at": k.created_at,
                "creator": k.creator,
            }
            for k in keys
        ]
    }


@router.post("", response_model=ApiKeyCreatedResponse, status_code=201)
async def create_api_key(
    body: ApiKeyCreate,
    ctx: TenantContext = Depends(require_permission("api_key.create")),
    svc: ApiKeyService = Depends(_svc),
):
    """Create a key. The full key is only returned ONCE."""
    api_key = await svc.create_key(
        tenant_id=ctx.tenant_id,
        created_by=ctx.user.id,
        name=body.name,
        expires_at=body.expires_at,
    )
    return {"api_key": api_key}


@router.delete("/{key_id}", response_model=MessageResponse)
async def revoke_api_key(
    key_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("api_key.revoke")),
    svc: ApiKeyService = Depends(_svc),
):
    await svc.revoke_key(ctx.tenant_id, key_id)
    return {"message": "API key revoked successfully"}
