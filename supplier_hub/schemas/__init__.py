from .base import ApiResponse, BaseSchema, IDSchema, TimestampSchema
from .failover import (
    FailoverConfig,
    FailoverStatus,
    FailoverTrigger,
    SupplierSwitchProgress,
    SupplierSwitchRequest,
    SupplierSwitchResult,
)
from .health import HealthCheckRecord, PerformanceAnalysis, SupplierHealth
from .supplier import (
    ActivateSupplierRequest,
    ConnectionTestResult,
    SupplierCreate,
    SupplierExport,
    SupplierResponse,
    SupplierStats,
    SupplierUpdate,
    mask_token,
)

__all__ = [
    "ActivateSupplierRequest",
    "ApiResponse",
    "BaseSchema",
    "ConnectionTestResult",
    "FailoverConfig",
    "FailoverStatus",
    "FailoverTrigger",
    "HealthCheckRecord",
    "IDSchema",
    "PerformanceAnalysis",
    "SupplierCreate",
    "SupplierExport",
    "SupplierHealth",
    "SupplierResponse",
    "SupplierStats",
    "SupplierSwitchProgress",
    "SupplierSwitchRequest",
    "SupplierSwitchResult",
    "SupplierUpdate",
    "TimestampSchema",
    "mask_token",
]
