from sqlalchemy import select

from supplier_hub.models.config_history import ConfigHistory
from supplier_hub.repositories.base import BaseRepository


class ConfigHistoryRepository(BaseRepository[ConfigHistory]):
    model = ConfigHistory

    async def list_by_type(self, config_type: str, limit: int = 50) -> list[ConfigHistory]:
        result = await self.session.execute(
            select(ConfigHistory)
            .where(ConfigHistory.config_type == config_type)
            .order_by(ConfigHistory.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
