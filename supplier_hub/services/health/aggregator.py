"""
HealthAggregator: 把一次探测结果与历史计数合并成健康快照

- 连续失败：成功清零，失败在库内现值基础上 +1
- 总请求/失败请求跨次累计，可用率由累计值重新计算
- 计数在 UPDATE 语句内自增，同一供应商的并发检查不会互相覆盖
- 快照回写到 Supplier，并追加一条 supplier_health_check 记录
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.config import settings
from supplier_hub.core.logging import logger
from supplier_hub.models.supplier import (
    UNHEALTHY_FAILURE_THRESHOLD,
    HealthStatus,
    Supplier,
)
from supplier_hub.repositories.supplier_repository import (
    SupplierHealthCheckRepository,
    SupplierRepository,
)
from supplier_hub.schemas.health import PerformanceAnalysis, SupplierHealth
from supplier_hub.schemas.supplier import ConnectionTestResult
from supplier_hub.services.errors import NotFoundError
from supplier_hub.services.health.prober import HealthProber
from supplier_hub.services.health.trend import analyze_trend
from supplier_hub.utils.time_utils import Datetime


def derive_status(is_healthy: bool, consecutive_failures: int) -> HealthStatus:
    if is_healthy:
        return HealthStatus.HEALTHY
    if consecutive_failures < UNHEALTHY_FAILURE_THRESHOLD:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


def build_health_fields(
    counters: dict[str, int],
    probe: ConnectionTestResult,
    checked_at: datetime,
) -> dict[str, Any]:
    """纯函数：由累加后的计数与探测结果组装健康字段"""
    total_requests = int(counters["total_requests"])
    failed_requests = int(counters["failed_requests"])
    uptime_percentage = (
        (total_requests - failed_requests) / total_requests * 100.0 if total_requests > 0 else 100.0
    )
    return {
        "is_healthy": bool(probe.success),
        "last_check_time": checked_at,
        "response_time_ms": int(probe.response_time_ms or 0),
        "consecutive_failures": int(counters["consecutive_failures"]),
        "uptime_percentage": uptime_percentage,
        "total_requests": total_requests,
        "failed_requests": failed_requests,
    }


class HealthAggregator:
    def __init__(self, session: AsyncSession, prober: HealthProber):
        self.session = session
        self.prober = prober
        self.supplier_repo = SupplierRepository(session)
        self.check_repo = SupplierHealthCheckRepository(session)

    async def _run_probe(self, supplier: Supplier) -> ConnectionTestResult:
        try:
            return await self.prober.probe(supplier)
        except Exception as exc:
            # 探测器异常同样是一个有效的健康结论
            logger.warning(f"supplier_probe_error supplier={supplier.id} err={exc!r}")
            return ConnectionTestResult(success=False, response_time_ms=None, error=str(exc) or type(exc).__name__)

    async def assess(self, supplier: Supplier) -> SupplierHealth:
        supplier_id = supplier.id
        probe = await self._run_probe(supplier)
        checked_at = Datetime.now()
        counters = await self.supplier_repo.record_probe_outcome(supplier_id, bool(probe.success))
        if counters is None:
            # 探测期间供应商已被删除
            await self.session.rollback()
            raise NotFoundError("Supplier not found")
        fields = build_health_fields(counters, probe, checked_at)
        status = derive_status(fields["is_healthy"], fields["consecutive_failures"])

        await self.supplier_repo.update_health_fields(supplier_id, fields, commit=False)
        await self.check_repo.create(
            {
                "supplier_id": supplier_id,
                "status": status.value,
                "error_message": probe.error[:512] if probe.error else None,
                "checked_at": checked_at,
                **{k: v for k, v in fields.items() if k != "last_check_time"},
            },
            commit=True,
        )

        health = SupplierHealth(
            supplier_id=supplier_id,
            is_healthy=fields["is_healthy"],
            last_check_time=checked_at,
            response_time_ms=fields["response_time_ms"],
            consecutive_failures=fields["consecutive_failures"],
            uptime_percentage=fields["uptime_percentage"],
            total_requests=fields["total_requests"],
            failed_requests=fields["failed_requests"],
            status=status,
            error_message=probe.error,
        )
        logger.info(
            f"supplier_health_assessed supplier={supplier_id} status={status.value} "
            f"failures={health.consecutive_failures} uptime={health.uptime_percentage:.2f}"
        )
        return health

    async def assess_by_id(self, supplier_id: uuid.UUID) -> SupplierHealth:
        supplier = await self.supplier_repo.get(supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier not found")
        return await self.assess(supplier)

    async def assess_all(self, category: str | None = None) -> list[SupplierHealth]:
        suppliers = await self.supplier_repo.list_suppliers(category)
        results: list[SupplierHealth] = []
        for supplier in suppliers:
            results.append(await self.assess(supplier))
        return results

    async def trend(self, supplier_id: uuid.UUID) -> PerformanceAnalysis | None:
        supplier = await self.supplier_repo.get(supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier not found")
        history = await self.check_repo.recent(supplier_id, limit=settings.HEALTH_HISTORY_LIMIT)
        analysis = analyze_trend(history)
        if analysis is not None:
            analysis.supplier_id = supplier_id
        return analysis


__all__ = ["HealthAggregator", "build_health_fields", "derive_status"]
