"""Pydantic schemas for datasets.

Learn: `schema` and `metadata` are opaque JSON documents. In Python they
are `data_schema` / `meta` (BaseModel and SQLAlchemy both claim the plain
names); on the wire they keep their plain names via aliases.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from datagov.schemas.common import ApiModel, CreatorRead, OpaqueJson

DatasetStatus = Literal["draft", "active", "archived"]


class DatasetCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[DatasetStatus] = None
    data_schema: Optional[OpaqueJson] = Field(None, alias="schema")
    meta: Optional[OpaqueJson] = Field(None, alias="metadata")


class DatasetUpdate(ApiModel):
    """Partial update — only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[DatasetStatus] = None
    data_schema: Optional[OpaqueJson] = Field(None, alias="schema")
    meta: Optional[OpaqueJson] = Field(None, alias="metadata")

    @field_validator("name", "status")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class DatasetRead(ApiModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    description: Optional[str] = None
    status: str
    data_schema: Optional[OpaqueJson] = Field(None, serialization_alias="schema")
    meta: Optional[OpaqueJson] = Field(None, serialization_alias="metadata")
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime


class DatasetDetail(DatasetRead):
    creator: Optional[CreatorRead] = None


class DatasetResponse(ApiModel):
    dataset: DatasetDetail


class DatasetListResponse(ApiModel):
    datasets: list[DatasetDetail]
