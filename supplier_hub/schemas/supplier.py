from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from supplier_hub.utils.time_utils import Datetime

from .base import BaseSchema, IDSchema, TimestampSchema


def mask_token(token: str | None) -> str:
    if not token:
        return ""
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-4:]}"


class SupplierCreate(BaseModel):
    category: str = Field(..., description="供应商类别 claude/codex")
    name: str = Field(..., description="展示名称")
    base_url: str = Field(..., description="访问 URL")
    auth_token: str = Field(..., description="访问密钥")
    timeout_ms: int | None = Field(default=None, description="请求超时（毫秒）")
    auto_update: bool | None = Field(default=None, description="是否自动更新")
    opus_model: str | None = None
    sonnet_model: str | None = None
    haiku_model: str | None = None

    @field_validator("name", "base_url", "auth_token", "category", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class SupplierUpdate(BaseModel):
    name: str | None = None
    base_url: str | None = None
    auth_token: str | None = None
    timeout_ms: int | None = None
    auto_update: bool | None = None
    opus_model: str | None = None
    sonnet_model: str | None = None
    haiku_model: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None

    @field_validator("name", "base_url", "auth_token", mode="before")
    @classmethod
    def _strip_optional(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class SupplierResponse(IDSchema, TimestampSchema):
    """对外展示的供应商，密钥只返回掩码"""
    category: str
    name: str
    base_url: str
    auth_token_masked: str = ""
    timeout_ms: int | None = None
    auto_update: bool = False
    opus_model: str | None = None
    sonnet_model: str | None = None
    haiku_model: str | None = None
    is_active: bool
    sort_order: int

    is_healthy: bool | None = None
    last_check_time: datetime | None = None
    response_time_ms: int | None = None
    consecutive_failures: int = 0
    uptime_percentage: float = 100.0
    total_requests: int = 0
    failed_requests: int = 0

    @field_validator("last_check_time", mode="after")
    @classmethod
    def _aware_optional(cls, value: datetime | None) -> datetime | None:
        return Datetime.ensure_aware(value)

    @model_validator(mode="before")
    @classmethod
    def _mask_token(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if "auth_token" in data:
                data = dict(data)
                data["auth_token_masked"] = mask_token(data.pop("auth_token"))
            return data
        # ORM 对象：只取声明过的字段，原始密钥不进入模型
        values = {name: getattr(data, name) for name in cls.model_fields if hasattr(data, name)}
        values["auth_token_masked"] = mask_token(getattr(data, "auth_token", None))
        return values


class SupplierExport(BaseSchema):
    """导出格式与 SupplierCreate 对齐，便于原样导入"""
    category: str
    name: str
    base_url: str
    auth_token: str
    timeout_ms: int | None = None
    auto_update: bool | None = None
    opus_model: str | None = None
    sonnet_model: str | None = None
    haiku_model: str | None = None


class ConnectionTestResult(BaseModel):
    success: bool
    response_time_ms: int | None = None
    error: str | None = None
    status_code: int | None = None


class SupplierStats(BaseModel):
    claude: int = 0
    codex: int = 0
    total: int = 0
    active_claude: str | None = None
    active_codex: str | None = None


class ActivateSupplierRequest(BaseModel):
    is_active: bool = True
