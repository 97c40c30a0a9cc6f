from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from supplier_hub.models.supplier import HealthStatus
from supplier_hub.utils.time_utils import Datetime

from .base import BaseSchema


class SupplierHealth(BaseModel):
    """某一时刻的健康快照（按需计算，不单独成表）"""
    supplier_id: UUID
    is_healthy: bool
    last_check_time: datetime
    response_time_ms: int = 0
    consecutive_failures: int = 0
    uptime_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    total_requests: int = 0
    failed_requests: int = 0
    status: HealthStatus
    error_message: str | None = None


class HealthCheckRecord(BaseSchema):
    supplier_id: UUID
    is_healthy: bool
    status: HealthStatus
    response_time_ms: int
    consecutive_failures: int
    uptime_percentage: float
    total_requests: int
    failed_requests: int
    error_message: str | None = None
    checked_at: datetime

    @field_validator("checked_at", mode="after")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return Datetime.ensure_aware(value)


class PerformanceAnalysis(BaseModel):
    supplier_id: UUID | None = None
    sample_size: int
    average_response_time_ms: int
    success_rate: float
    uptime_percentage: float
    trend: Literal["improving", "stable", "degrading"]
    recommendation: str
