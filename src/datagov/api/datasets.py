"""Dataset API routes.

Learn: Routes stay thin — the guard resolves the tenant, the body is
validated by the schema, and DatasetService scopes every query by
(tenant_id, dataset_id). A dataset id from another workspace is a 404.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.guard import TenantContext, require_permission
from datagov.db.engine import get_db
from datagov.schemas.common import MessageResponse
from datagov.schemas.dataset import (
    DatasetCreate,
    DatasetListResponse,
    DatasetResponse,
    DatasetUpdate,
)
from datagov.services.dataset_service import DatasetService

router = APIRouter(prefix="/tenants/{tenant_id}/datasets")


def _svc(db: AsyncSession = Depends(get_db)) -> DatasetService:
    return DatasetService(db)


@router.get("", response_model=DatasetListResponse)
async def list_datasets(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: TenantContext = Depends(require_permission("dataset.list")),
    svc: DatasetService = Depends(_svc),
):
    return {"datasets": await svc.list_datasets(ctx.tenant_id, limit=limit, offset=offset)}


@router.post("", response_model=DatasetResponse, status_code=201)
async def create_dataset(
    body: DatasetCreate,
    ctx: TenantContext = Depends(require_permission("dataset.create")),
    svc: DatasetService = Depends(_svc),
):
    dataset = await svc.create_dataset(
        tenant_id=ctx.tenant_id,
        created_by=ctx.user.id,
        name=body.name,
        description=body.description,
        status=body.status,
        data_schema=body.data_schema,
        meta=body.meta,
    )
    return {"dataset": dataset}


@router.get("/{dataset_id}", response_model=DatasetResponse)
async def get_dataset(
    dataset_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("dataset.read")),
    svc: DatasetService = Depends(_svc),
):
    return {"dataset": await svc.get_dataset(ctx.tenant_id, dataset_id)}


@router.patch("/{dataset_id}", response_model=DatasetResponse)
async def update_dataset(
    dataset_id: uuid.UUID,
    body: DatasetUpdate,
    ctx: TenantContext = Depends(require_permission("dataset.update")),
    svc: DatasetService = Depends(_svc),
):
    dataset = await svc.update_dataset(
        ctx.tenant_id, dataset_id, body.model_dump(exclude_unset=True)
    )
    return {"dataset": dataset}


@router.delete("/{dataset_id}", response_model=MessageResponse)
async def delete_dataset(
    dataset_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("dataset.delete")),
    svc: DatasetService = Depends(_svc),
):
    await svc.delete_dataset(ctx.tenant_id, dataset_id)
    return {"message": "Dataset deleted successfully"}
