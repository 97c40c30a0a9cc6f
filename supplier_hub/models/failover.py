"""
FailoverConfigRecord: 按类别持久化的故障转移策略

枚举在内存中为封闭类型，落库时使用其规范字符串。
"""

from __future__ import annotations

import enum
from typing import Any

from sqlalchemy import JSON, Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ConditionType(str, enum.Enum):
    CONSECUTIVE_FAILURES = "consecutive_failures"
    RESPONSE_TIME = "response_time"
    SUCCESS_RATE = "success_rate"


class SwitchReason(str, enum.Enum):
    MANUAL = "manual"
    AUTO_FAILOVER = "auto_failover"
    HEALTH_CHECK = "health_check"


class FailoverConfigRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "failover_config"

    category: Mapped[str] = mapped_column(String(16), nullable=False, unique=True, index=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    trigger_conditions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, comment="触发条件（类型/阈值/评估窗口），当前不参与评分"
    )
    auto_rollback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rollback_delay_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=300)
    max_consecutive_failures: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    max_response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=5000)
    min_success_rate: Mapped[float] = mapped_column(Float, nullable=False, default=95.0)

    def __repr__(self) -> str:
        return f"<FailoverConfigRecord(category={self.category}, enabled={self.enabled})>"
