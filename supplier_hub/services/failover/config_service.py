from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.logging import logger
from supplier_hub.models.supplier import SupplierCategory
from supplier_hub.repositories import FailoverConfigRepository
from supplier_hub.schemas.failover import FailoverConfig
from supplier_hub.services.errors import SupplierValidationError

VALID_CATEGORIES = {c.value for c in SupplierCategory}


def ensure_category(category: str) -> str:
    if category not in VALID_CATEGORIES:
        raise SupplierValidationError(f"Invalid category: {category}")
    return category


def validate_failover_config(config: FailoverConfig) -> list[str]:
    errors: list[str] = []
    if config.max_consecutive_failures < 1:
        errors.append("最大连续失败次数必须大于0")
    if config.max_response_time_ms < 100:
        errors.append("最大响应时间必须大于100ms")
    if config.min_success_rate < 0 or config.min_success_rate > 100:
        errors.append("最小成功率必须在0-100之间")
    if config.rollback_delay_seconds < 10:
        errors.append("回滚延迟必须大于10秒")
    return errors


class FailoverConfigService:
    """按类别读写故障转移策略；首次读取时写入默认值"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = FailoverConfigRepository(session)

    async def get(self, category: str) -> FailoverConfig:
        ensure_category(category)
        record = await self.repo.get_by_category(category)
        if record is None:
            seed = FailoverConfig()
            try:
                record = await self.repo.create(
                    {"category": category, **seed.model_dump(mode="json")}
                )
                logger.info(f"failover_config_seeded category={category}")
            except IntegrityError:
                # 并发首次读取，另一方已写入种子
                await self.session.rollback()
                record = await self.repo.get_by_category(category)
                if record is None:
                    raise
        return FailoverConfig.model_validate(record)

    async def update(self, category: str, config: FailoverConfig) -> FailoverConfig:
        ensure_category(category)
        errors = validate_failover_config(config)
        if errors:
            raise SupplierValidationError("; ".join(errors), errors=errors)
        record = await self.repo.upsert(category, config.model_dump(mode="json"))
        logger.info(
            f"failover_config_updated category={category} enabled={config.enabled} "
            f"max_cf={config.max_consecutive_failures} max_rt={config.max_response_time_ms} "
            f"min_sr={config.min_success_rate}"
        )
        return FailoverConfig.model_validate(record)


__all__ = ["FailoverConfigService", "ensure_category", "validate_failover_config"]
