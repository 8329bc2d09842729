"""Tenant service — workspaces and the caller's view of them."""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from datagov.auth.roles import OWNER
from datagov.db.models import Tenant, TenantMember, utcnow
from datagov.errors import NotFound
from datagov.utils import generate_slug

logger = structlog.get_logger()


class TenantService:
    """Business logic for tenants."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: uuid.UUID) -> list[tuple[Tenant, str]]:
        """Every tenant `user_id` belongs to, paired with their role there."""
        result = await self.db.execute(
            select(TenantMember)
            .where(TenantMember.user_id == user_id)
            .options(selectinload(TenantMember.tenant))
            .order_by(TenantMember.created_at)
        )
        return [(m.tenant, m.role) for m in result.scalars().all()]

    async def create_tenant(
        self, owner_id: uuid.UUID, name: str, description: Optional[str] = None
    ) -> Tenant:
        """Create a tenant; the creator becomes its owner."""
        tenant = Tenant(name=name, slug=generate_slug(name), description=description)
        self.db.add(tenant)
        await self.db.flush()

        self.db.add(TenantMember(tenant_id=tenant.id, user_id=owner_id, role=OWNER))
        await self.db.commit()

        logger.info("tenant.created", tenant_id=str(tenant.id), slug=tenant.slug)
        return tenant

    async def get_tenant(self, tenant_id: uuid.UUID) -> Tenant:
        tenant = await self.db.get(Tenant, tenant_id)
        if not tenant:
            raise NotFound("Tenant not found")
        return tenant

    async def update_tenant(self, tenant_id: uuid.UUID, changes: dict) -> Tenant:
        """Apply `changes` (name and/or description). Renaming regenerates the slug."""
        tenant = await self.get_tenant(tenant_id)

        if changes.get("name"):
            tenant.name = changes["name"]
            tenant.slug = generate_slug(changes["name"])
        if "description" in changes:
            tenant.description = changes["description"]
        tenant.updated_at = utcnow()

        await self.db.commit()
        return tenant

    async def delete_tenant(self, tenant_id: uuid.UUID) -> None:
        """Delete a tenant. Memberships, datasets, jobs, keys cascade in the DB."""
        result = await self.db.execute(delete(Tenant).where(Tenant.id == tenant_id))
        if result.rowcount == 0:
            raise NotFound("Tenant not found")
        await self.db.commit()
        logger.info("tenant.deleted", tenant_id=str(tenant_id))
