"""Job API routes — definitions, runs, run history.

Learn: POST …/run answers immediately with the run in "running" state.
Completion happens later in the app's JobRunner (app.state.job_runner),
reached through the get_job_runner dependency so tests can swap it.
"""

import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from datagov.auth.guard import TenantContext, require_permission
from datagov.db.engine import get_db
from datagov.schemas.common import MessageResponse
from datagov.schemas.job import (
    JobCreate,
    JobListResponse,
    JobResponse,
    JobRunListResponse,
    JobRunResponse,
    JobUpdate,
)
from datagov.services.job_runner import JobRunner
from datagov.services.job_service import JobService

router = APIRouter(prefix="/tenants/{tenant_id}/jobs")


def get_job_runner(request: Request) -> JobRunner:
    return request.app.state.job_runner


def _svc(
    db: AsyncSession = Depends(get_db),
    runner: JobRunner = Depends(get_job_runner),
) -> JobService:
    return JobService(db, runner=runner)


# ─── Jobs ───────────────────────────────────────────────

@router.get("", response_model=JobListResponse)
async def list_jobs(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: TenantContext = Depends(require_permission("job.list")),
    svc: JobService = Depends(_svc),
):
    return {"jobs": await svc.list_jobs(ctx.tenant_id, limit=limit, offset=offset)}


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    body: JobCreate,
    ctx: TenantContext = Depends(require_permission("job.create")),
    svc: JobService = Depends(_svc),
):
    job = await svc.create_job(
        tenant_id=ctx.tenant_id,
        created_by=ctx.user.id,
        name=body.name,
        type=body.type,
        description=body.description,
        config=body.config,
        schedule=body.schedule,
        is_active=body.is_active,
    )
    return {"job": job}


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("job.read")),
    svc: JobService = Depends(_svc),
):
    return {"job": await svc.get_job(ctx.tenant_id, job_id)}


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: uuid.UUID,
    body: JobUpdate,
    ctx: TenantContext = Depends(require_permission("job.update")),
    svc: JobService = Depends(_svc),
):
    job = await svc.update_job(ctx.tenant_id, job_id, body.model_dump(exclude_unset=True))
    return {"job": job}


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("job.delete")),
    svc: JobService = Depends(_svc),
):
    await svc.delete_job(ctx.tenant_id, job_id)
    return {"message": "Job deleted successfully"}


# ─── Runs ───────────────────────────────────────────────

@router.post("/{job_id}/run", response_model=JobRunResponse)
async def run_job(
    job_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("job.run")),
    svc: JobService = Depends(_svc),
):
    """Start a run. Returns while it is still running."""
    return {"run": await svc.run_job(ctx.tenant_id, job_id)}


@router.get("/{job_id}/runs", response_model=JobRunListResponse)
async def list_runs(
    job_id: uuid.UUID,
    ctx: TenantContext = Depends(require_permission("job.runs")),
    svc: JobService = Depends(_svc),
):
    """Run history, newest first."""
    return {"runs": await svc.list_runs(ctx.tenant_id, job_id)}
