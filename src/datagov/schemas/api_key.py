"""Pydantic schemas for API keys.

Learn: Two read shapes on purpose. ApiKeyCreated carries the full secret
and is only ever built by the create route. ApiKeyRead is built from
redacted values — the list route never sees the raw key.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from datagov.schemas.common import ApiModel, CreatorRead

KEY_WARNING = "Save this key securely. You will not be able to see it again."


class ApiKeyCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    expires_at: Optional[datetime] = None


class ApiKeyRead(ApiModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    key: str  # first 8 + "..." + last 4
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_by: uuid.UUID
    created_at: datetime
    creator: Optional[CreatorRead] = None


class ApiKeyCreated(ApiModel):
    """Response for API key creation — key is only shown ONCE."""
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    key: str  # Full key, only returned on creation
    expires_at: Optional[datetime] = None
    created_by: uuid.UUID
    created_at: datetime
    warning: str = KEY_WARNING


class ApiKeyListResponse(ApiModel):
    api_keys: list[ApiKeyRead]


class ApiKeyCreatedResponse(ApiModel):
    api_key: ApiKeyCreated
