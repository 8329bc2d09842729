"""Pydantic schemas for jobs and job runs."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from datagov.schemas.common import ApiModel, CreatorRead, OpaqueJson


# ─── Jobs ───────────────────────────────────────────────

class JobCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: str = Field(..., min_length=1, max_length=100)
    config: Optional[OpaqueJson] = None
    schedule: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class JobUpdate(ApiModel):
    """Partial update — only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    config: Optional[OpaqueJson] = None
    schedule: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    @field_validator("name", "type", "is_active")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class JobRead(ApiModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    description: Optional[str] = None
    type: str
    config: Optional[OpaqueJson] = None
    schedule: Optional[str] = None
    is_active: bool
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime


class JobDetail(JobRead):
    creator: Optional[CreatorRead] = None


class JobResponse(ApiModel):
    job: JobDetail


class JobListResponse(ApiModel):
    jobs: list[JobDetail]


# ─── Runs ───────────────────────────────────────────────

class JobRunRead(ApiModel):
    id: uuid.UUID
    job_id: uuid.UUID
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    result: Optional[OpaqueJson] = None
    created_at: datetime


class JobRunResponse(ApiModel):
    run: JobRunRead


class JobRunListResponse(ApiModel):
    runs: list[JobRunRead]
