from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from supplier_hub.utils.time_utils import Datetime

T = TypeVar("T")


class BaseSchema(BaseModel):
    """
    基础 Schema
    配置:
    - from_attributes=True: 允许从 ORM 对象读取
    """
    model_config = ConfigDict(from_attributes=True, strict=False, populate_by_name=True, extra="ignore")


class IDSchema(BaseSchema):
    id: UUID


class TimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return Datetime.ensure_aware(value)


class ApiResponse(BaseModel, Generic[T]):
    """
    统一响应信封：失败在信封内报告，不使用传输层错误
    """
    # 路由返回未参数化的信封，按 response_model 校验时从属性读取
    model_config = ConfigDict(from_attributes=True)

    success: bool
    data: T | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: T | None = None, message: str | None = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def error(cls, message: str, data: T | None = None) -> "ApiResponse[T]":
        return cls(success=False, data=data, message=message)
