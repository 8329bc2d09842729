"""Pydantic schemas for tenants (workspaces)."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from datagov.schemas.common import ApiModel


class TenantCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class TenantUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class TenantRead(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TenantWithRole(TenantRead):
    """A tenant as seen by one of its members."""
    role: str


class TenantResponse(ApiModel):
    tenant: TenantRead


class TenantListResponse(ApiModel):
    tenants: list[TenantWithRole]
