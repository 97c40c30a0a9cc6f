from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from supplier_hub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ConfigHistory(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """配置备份/恢复流水（只追加）"""

    __tablename__ = "config_history"

    config_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True, comment="claude/codex")
    config_path: Mapped[str] = mapped_column(String(255), nullable=False, comment="备份对象标识")
    backup_content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    operation_type: Mapped[str] = mapped_column(String(16), nullable=False, comment="backup/restore")
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ConfigHistory(type={self.config_type}, op={self.operation_type})>"
