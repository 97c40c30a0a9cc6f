"""
ORM 基类与通用列

本地单文件 SQLite 存储，表结构由 init_db 直接 create_all，不维护迁移脚本。
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from supplier_hub.utils.time_utils import Datetime


class Base(DeclarativeBase):
    pass


class UUIDPrimaryKeyMixin:
    # SQLite 下落库为 32 位十六进制字符串
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    创建/更新时间

    写入统一用 UTC；SQLite 不保存时区，读回后由 ensure_aware 补齐。
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=Datetime.now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=Datetime.now, onupdate=Datetime.now, nullable=False
    )
