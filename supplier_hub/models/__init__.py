from .base import Base
from .config_history import ConfigHistory
from .failover import ConditionType, FailoverConfigRecord, SwitchReason
from .supplier import (
    UNHEALTHY_FAILURE_THRESHOLD,
    HealthStatus,
    Supplier,
    SupplierCategory,
    SupplierHealthCheck,
)

__all__ = [
    "Base",
    "ConditionType",
    "ConfigHistory",
    "FailoverConfigRecord",
    "HealthStatus",
    "Supplier",
    "SupplierCategory",
    "SupplierHealthCheck",
    "SwitchReason",
    "UNHEALTHY_FAILURE_THRESHOLD",
]
