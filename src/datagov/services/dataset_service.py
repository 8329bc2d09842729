"""Dataset service.

Learn: Every query here filters on tenant_id AND id together. Looking a
dataset up by id alone would let a member of workspace A read workspace
B's data just by guessing ids — so there is no such method.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from datagov.db.models import Dataset, utcnow
from datagov.errors import NotFound


class DatasetService:
    """Business logic for datasets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_datasets(
        self, tenant_id: uuid.UUID, limit: int = 100, offset: int = 0
    ) -> list[Dataset]:
        result = await self.db.execute(
            select(Dataset)
            .where(Dataset.tenant_id == tenant_id)
            .options(selectinload(Dataset.creator))
            .order_by(Dataset.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def get_dataset(self, tenant_id: uuid.UUID, dataset_id: uuid.UUID) -> Dataset:
        result = await self.db.execute(
            select(Dataset)
            .where(Dataset.id == dataset_id, Dataset.tenant_id == tenant_id)
            .options(selectinload(Dataset.creator))
            .execution_options(populate_existing=True)
        )
        dataset = result.scalars().first()
        if not dataset:
            raise NotFound("Dataset not found")
        return dataset

    async def create_dataset(
        self,
        tenant_id: uuid.UUID,
        created_by: uuid.UUID,
        name: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        data_schema: Any = None,
        meta: Any = None,
    ) -> Dataset:
        dataset = Dataset(
            tenant_id=tenant_id,
            name=name,
            description=description,
            status=status or "draft",
            data_schema=data_schema,
            meta=meta,
            created_by=created_by,
        )
        self.db.add(dataset)
        await self.db.commit()
        return await self.get_dataset(tenant_id, dataset.id)

    async def update_dataset(
        self, tenant_id: uuid.UUID, dataset_id: uuid.UUID, changes: dict
    ) -> Dataset:
        dataset = await self.get_dataset(tenant_id, dataset_id)
        for field, value in changes.items():
            setattr(dataset, field, value)
        dataset.updated_at = utcnow()
        await self.db.commit()
        return dataset

    async def delete_dataset(self, tenant_id: uuid.UUID, dataset_id: uuid.UUID) -> None:
        result = await self.db.execute(
            delete(Dataset).where(Dataset.id == dataset_id, Dataset.tenant_id == tenant_id)
        )
        if result.rowcount == 0:
            raise NotFound("Dataset not found")
        await self.db.commit()
