"""
HealthMonitor: 周期性对每个类别执行一次自动故障转移评估

仅在 HEALTH_MONITOR_ENABLED 时由应用 lifespan 启动；单轮异常只记录日志，不中断循环。
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.config import settings
from supplier_hub.core.database import AsyncSessionLocal
from supplier_hub.core.logging import logger
from supplier_hub.models.failover import SwitchReason
from supplier_hub.models.supplier import SupplierCategory
from supplier_hub.schemas.failover import SupplierSwitchResult
from supplier_hub.services.failover.orchestrator import SwitchOrchestrator
from supplier_hub.services.health.prober import HealthProber, HttpHealthProber


class HealthMonitor:
    def __init__(
        self,
        *,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        prober: HealthProber | None = None,
        interval_seconds: float | None = None,
        categories: list[str] | None = None,
    ):
        self._session_factory = session_factory
        self.prober = prober or HttpHealthProber()
        interval = interval_seconds if interval_seconds is not None else settings.HEALTH_MONITOR_INTERVAL_SECONDS
        self.interval_seconds = max(float(interval), 0.1)
        self.categories = categories if categories is not None else [c.value for c in SupplierCategory]
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> dict[str, SupplierSwitchResult]:
        results: dict[str, SupplierSwitchResult] = {}
        for category in self.categories:
            async with self._session_factory() as session:
                orchestrator = SwitchOrchestrator(session, self.prober)
                result = await orchestrator.auto_failover(category, reason=SwitchReason.HEALTH_CHECK)
            results[category] = result
            if result.success:
                logger.info(f"health_monitor_switched category={category} to={result.to_supplier_id}")
            else:
                logger.debug(f"health_monitor_checked category={category} message={result.message}")
        return results

    async def _loop(self) -> None:
        logger.info(f"health_monitor_started interval={self.interval_seconds}s categories={self.categories}")
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception(f"health_monitor_cycle_failed err={exc!r}")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="supplier-health-monitor")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("health_monitor_stopped")


__all__ = ["HealthMonitor"]
