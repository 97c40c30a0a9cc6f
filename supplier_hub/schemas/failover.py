from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from supplier_hub.models.failover import ConditionType, SwitchReason

from .base import BaseSchema


class FailoverTrigger(BaseModel):
    condition_type: ConditionType
    threshold: float
    evaluation_window_minutes: int = 5


class FailoverConfig(BaseSchema):
    """故障转移策略，每个类别一份；字段默认值即首次读取时的种子值"""
    enabled: bool = True
    trigger_conditions: list[FailoverTrigger] = Field(default_factory=list)
    auto_rollback: bool = True
    rollback_delay_seconds: int = 300
    max_consecutive_failures: int = 3
    max_response_time_ms: int = 5000
    min_success_rate: float = 95.0


class SupplierSwitchRequest(BaseModel):
    from_supplier_id: UUID
    to_supplier_id: UUID
    switch_reason: SwitchReason = SwitchReason.MANUAL
    create_backup: bool = False
    rollback_on_failure: bool = False


class SupplierSwitchResult(BaseModel):
    success: bool
    message: str
    from_supplier_id: UUID | None = None
    to_supplier_id: UUID | None = None
    switch_time: datetime
    rollback_available: bool = False
    backup_id: UUID | None = None
    error: str | None = None
    switch_id: str | None = None
    score: float | None = None


class SupplierSwitchProgress(BaseModel):
    switch_id: str
    category: str
    total_steps: int
    completed_steps: int
    overall_progress: int = Field(ge=0, le=100)
    current_step: str
    from_supplier: UUID | None = None
    to_supplier: UUID | None = None
    start_time: datetime
    estimated_completion: datetime | None = None
    rollback_available: bool = False
    is_completed: bool = False
    has_error: bool = False
    error_message: str | None = None


class FailoverStatus(BaseModel):
    category: str
    active_supplier_id: UUID | None = None
    active_supplier_name: str | None = None
    is_transitioning: bool = False
    current_switch: SupplierSwitchProgress | None = None
    config: FailoverConfig
