"""Job service — job definitions and their runs.

Learn: Like datasets, every lookup is scoped by (tenant_id, id). Runs
belong to a job, so reading runs first proves the job is in the tenant.

Running a job inserts a JobRun in "running" state and hands its id to the
JobRunner, which flips it to "completed" later. The HTTP response goes out
immediately with the running state.
"""

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from datagov.db.models import Job, JobRun, utcnow
from datagov.errors import NotFound
from datagov.services.job_runner import JobRunner

logger = structlog.get_logger()


class JobService:
    """Business logic for jobs."""

    def __init__(self, db: AsyncSession, runner: Optional[JobRunner] = None):
        self.db = db
        self.runner = runner

    # ─── Jobs ───────────────────────────────────────────

    async def list_jobs(
        self, tenant_id: uuid.UUID, limit: int = 100, offset: int = 0
    ) -> list[Job]:
        result = await self.db.execute(
            select(Job)
            .where(Job.tenant_id == tenant_id)
            .options(selectinload(Job.creator))
            .order_by(Job.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def get_job(self, tenant_id: uuid.UUID, job_id: uuid.UUID) -> Job:
        result = await self.db.execute(
            select(Job)
            .where(Job.id == job_id, Job.tenant_id == tenant_id)
            .options(selectinload(Job.creator))
            .execution_options(populate_existing=True)
        )
        job = result.scalars().first()
        if not job:
            raise NotFound("Job not found")
        return job

    async def create_job(
        self,
        tenant_id: uuid.UUID,
        created_by: uuid.UUID,
        name: str,
        type: str,
        description: Optional[str] = None,
        config: Any = None,
        schedule: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Job:
        job = Job(
            tenant_id=tenant_id,
            name=name,
            description=description,
            type=type,
            config=config,
            schedule=schedule,
            is_active=True if is_active is None else is_active,
            created_by=created_by,
        )
        self.db.add(job)
        await self.db.commit()
        return await self.get_job(tenant_id, job.id)

    async def update_job(self, tenant_id: uuid.UUID, job_id: uuid.UUID, changes: dict) -> Job:
        job = await self.get_job(tenant_id, job_id)
        for field, value in changes.items():
            setattr(job, field, value)
        job.updated_at = utcnow()
        await self.db.commit()
        return job

    async def delete_job(self, tenant_id: uuid.UUID, job_id: uuid.UUID) -> None:
        result = await self.db.execute(
            delete(Job).where(Job.id == job_id, Job.tenant_id == tenant_id)
        )
        if result.rowcount == 0:
            raise NotFound("Job not found")
        await self.db.commit()

    # ─── Runs ───────────────────────────────────────────

    async def run_job(self, tenant_id: uuid.UUID, job_id: uuid.UUID) -> JobRun:
        """Record a new run and schedule its (simulated) completion."""
        job = await self.get_job(tenant_id, job_id)

        run = JobRun(job_id=job.id, status="running", started_at=utcnow())
        self.db.add(run)
        await self.db.commit()

        logger.info("job_run.started", job_id=str(job.id), run_id=str(run.id))
        if self.runner is not None:
            self.runner.schedule(run.id)
        return run

    async def list_runs(self, tenant_id: uuid.UUID, job_id: uuid.UUID) -> list[JobRun]:
        job = await self.get_job(tenant_id, job_id)
        result = await self.db.execute(
            select(JobRun)
            .where(JobRun.job_id == job.id)
            .order_by(JobRun.created_at.desc())
        )
        return list(result.scalars().all())
