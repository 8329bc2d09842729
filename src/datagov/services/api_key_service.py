"""API key service.

Learn: The raw key exists in exactly one response — the one that created
it. list_keys() returns rows, and the route only ever serializes them
through redact_key(). Keys are never logged, only their ids.
"""

import uuid
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from datagov.db.models import ApiKey
from datagov.errors import NotFound
from datagov.utils import generate_api_key

logger = structlog.get_logger()


class ApiKeyService:
    """Business logic for tenant API keys."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_keys(self, tenant_id: uuid.UUID) -> list[ApiKey]:
        result = await self.db.execute(
            select(ApiKey)
            .where(ApiKey.tenant_id == tenant_id)
            .options(selectinload(ApiKey.creator))
            .order_by(ApiKey.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_key(
        self,
        tenant_id: uuid.UUID,
        created_by: uuid.UUID,
        name: str,
        expires_at: Optional[datetime] = None,
    ) -> ApiKey:
        api_key = ApiKey(
            tenant_id=tenant_id,
            name=name,
            key=generate_api_key(),
            expires_at=expires_at,
            created_by=created_by,
        )
        self.db.add(api_key)
        await self.db.commit()
        logger.info("api_key.created", tenant_id=str(tenant_id), api_key_id=str(api_key.id))
        return api_key

    async def revoke_key(self, tenant_id: uuid.UUID, key_id: uuid.UUID) -> None:
        result = await self.db.execute(
            delete(ApiKey).where(ApiKey.id == key_id, ApiKey.tenant_id == tenant_id)
        )
        if result.rowcount == 0:
            raise NotFound("API key not found")
        await self.db.commit()
        logger.info("api_key.revoked", tenant_id=str(tenant_id), api_key_id=str(key_id))
