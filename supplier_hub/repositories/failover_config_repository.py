from typing import Any

from sqlalchemy import select

from supplier_hub.models.failover import FailoverConfigRecord
from supplier_hub.repositories.base import BaseRepository


class FailoverConfigRepository(BaseRepository[FailoverConfigRecord]):
    model = FailoverConfigRecord

    async def get_by_category(self, category: str) -> FailoverConfigRecord | None:
        result = await self.session.execute(
            select(FailoverConfigRecord)
            .where(FailoverConfigRecord.category == category)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def upsert(self, category: str, values: dict[str, Any]) -> FailoverConfigRecord:
        existing = await self.get_by_category(category)
        if existing:
            return await self.update(existing, values)
        return await self.create({"category": category, **values})
