"""
FastAPI 依赖：探测器与各业务服务

探测器单独成为依赖，测试中通过 app.dependency_overrides 注入确定性结果。
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.database import get_db
from supplier_hub.services.failover import FailoverConfigService, SwitchOrchestrator
from supplier_hub.services.health import HealthAggregator, HealthProber, HttpHealthProber
from supplier_hub.services.suppliers import SupplierService


def get_health_prober() -> HealthProber:
    return HttpHealthProber()


def get_supplier_service(
    db: AsyncSession = Depends(get_db),
    prober: HealthProber = Depends(get_health_prober),
) -> SupplierService:
    return SupplierService(db, prober)


def get_health_aggregator(
    db: AsyncSession = Depends(get_db),
    prober: HealthProber = Depends(get_health_prober),
) -> HealthAggregator:
    return HealthAggregator(db, prober)


def get_failover_config_service(db: AsyncSession = Depends(get_db)) -> FailoverConfigService:
    return FailoverConfigService(db)


def get_switch_orchestrator(
    db: AsyncSession = Depends(get_db),
    prober: HealthProber = Depends(get_health_prober),
) -> SwitchOrchestrator:
    return SwitchOrchestrator(db, prober)


__all__ = [
    "get_failover_config_service",
    "get_health_aggregator",
    "get_health_prober",
    "get_supplier_service",
    "get_switch_orchestrator",
]
