"""
Supplier: 已登记的上游 AI 服务端点

- category 区分 claude / codex，同类别内激活互斥
- 健康字段只由健康聚合器写入，累计计数跨次检查保留
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import UUID as SA_UUID
from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SupplierCategory(str, enum.Enum):
    """供应商类别"""

    CLAUDE = "claude"
    CODEX = "codex"


class HealthStatus(str, enum.Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


# 连续失败达到该值即判定为 Unhealthy
UNHEALTHY_FAILURE_THRESHOLD = 3


class Supplier(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "supplier"

    category: Mapped[str] = mapped_column(String(16), nullable=False, index=True, comment="claude/codex")
    name: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, comment="展示名称（唯一）")
    base_url: Mapped[str] = mapped_column(String(255), nullable=False, comment="访问 URL")
    auth_token: Mapped[str] = mapped_column(Text, nullable=False, comment="访问密钥")
    timeout_ms: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="请求超时（毫秒）")
    auto_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    opus_model: Mapped[str | None] = mapped_column(String(128), nullable=True, comment="opus 模型名覆盖")
    sonnet_model: Mapped[str | None] = mapped_column(String(128), nullable=True, comment="sonnet 模型名覆盖")
    haiku_model: Mapped[str | None] = mapped_column(String(128), nullable=True, comment="haiku 模型名覆盖")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # 健康信息（滚动累计）
    is_healthy: Mapped[bool | None] = mapped_column(Boolean, nullable=True, comment="最近一次检查是否健康")
    last_check_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    response_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="最近一次响应耗时")
    consecutive_failures: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    uptime_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=100.0, server_default="100")
    total_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    failed_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    health_checks: Mapped[list["SupplierHealthCheck"]] = relationship(
        "SupplierHealthCheck",
        back_populates="supplier",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_supplier_category_active", "category", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Supplier(category={self.category}, name={self.name}, active={self.is_active})>"


class SupplierHealthCheck(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    单次健康检查记录（只追加），用于趋势分析
    """

    __tablename__ = "supplier_health_check"

    supplier_id: Mapped[uuid.UUID] = mapped_column(
        SA_UUID(as_uuid=True), ForeignKey("supplier.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_healthy: Mapped[bool] = mapped_column(Boolean, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, comment="healthy/degraded/unhealthy")
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    consecutive_failures: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    uptime_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    total_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(String(512), nullable=True)
    checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    supplier: Mapped["Supplier"] = relationship("Supplier", back_populates="health_checks")

    def __repr__(self) -> str:
        return f"<SupplierHealthCheck(supplier={self.supplier_id}, status={self.status})>"
