from .services import (
    get_failover_config_service,
    get_health_aggregator,
    get_health_prober,
    get_supplier_service,
    get_switch_orchestrator,
)

__all__ = [
    "get_failover_config_service",
    "get_health_aggregator",
    "get_health_prober",
    "get_supplier_service",
    "get_switch_orchestrator",
]
