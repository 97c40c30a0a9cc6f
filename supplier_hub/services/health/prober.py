"""
HealthProber: 对单个供应商端点做一次连通性/延迟检查

- 可替换：聚合器只依赖 probe(supplier) 协议，测试注入确定性结果
- 超时严格按供应商 timeout_ms 执行，到期记为失败而不是挂起
- 2xx/3xx 或允许列表内的状态码视为可达
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol

import httpx

from supplier_hub.core.config import settings
from supplier_hub.core.http_client import create_async_http_client
from supplier_hub.core.logging import logger
from supplier_hub.core.metrics import RequestTimer, record_probe
from supplier_hub.models.supplier import Supplier, SupplierCategory
from supplier_hub.schemas.supplier import ConnectionTestResult


class HealthProber(Protocol):
    async def probe(self, supplier: Supplier) -> ConnectionTestResult: ...


def build_probe_headers(supplier: Supplier) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {supplier.auth_token}"}
    if supplier.category == SupplierCategory.CLAUDE.value:
        headers["x-api-key"] = supplier.auth_token
        headers["anthropic-version"] = "2023-06-01"
    return headers


def build_probe_url(base_url: str, probe_path: str | None = None) -> str:
    path = (probe_path if probe_path is not None else settings.HEALTH_PROBE_PATH) or ""
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class HttpHealthProber:
    """基于 httpx 的真实探测"""

    def __init__(
        self,
        *,
        allowed_status: set[int] | None = None,
        probe_path: str | None = None,
        default_timeout_ms: int | None = None,
        client_factory: Callable[..., httpx.AsyncClient] = create_async_http_client,
    ):
        self.allowed_status = (
            set(allowed_status)
            if allowed_status is not None
            else set(settings.HEALTH_PROBE_ALLOWED_STATUS)
        )
        self.probe_path = probe_path
        self.default_timeout_ms = default_timeout_ms or settings.HEALTH_PROBE_DEFAULT_TIMEOUT_MS
        self._client_factory = client_factory

    def _timeout_seconds(self, supplier: Supplier) -> float:
        timeout_ms = supplier.timeout_ms if supplier.timeout_ms and supplier.timeout_ms > 0 else self.default_timeout_ms
        return timeout_ms / 1000.0

    def _is_reachable(self, status_code: int) -> bool:
        return 200 <= status_code < 400 or status_code in self.allowed_status

    async def probe(self, supplier: Supplier) -> ConnectionTestResult:
        url = build_probe_url(supplier.base_url, self.probe_path)
        timeout = self._timeout_seconds(supplier)
        timer = RequestTimer()
        try:
            async with self._client_factory(timeout=timeout) as client:
                # httpx 的 timeout 按阶段计时，外层再加一道总时限
                resp = await asyncio.wait_for(
                    client.get(url, headers=build_probe_headers(supplier)),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            result = ConnectionTestResult(
                success=False,
                response_time_ms=timer.millis(),
                error=f"timeout after {int(timeout * 1000)}ms",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            result = ConnectionTestResult(
                success=False,
                response_time_ms=timer.millis(),
                error=f"{type(exc).__name__}: {exc}",
            )
        else:
            elapsed = timer.millis()
            if self._is_reachable(resp.status_code):
                result = ConnectionTestResult(
                    success=True, response_time_ms=elapsed, status_code=resp.status_code
                )
            else:
                result = ConnectionTestResult(
                    success=False,
                    response_time_ms=elapsed,
                    status_code=resp.status_code,
                    error=f"unexpected status {resp.status_code}",
                )

        if not result.success:
            logger.warning(f"supplier_probe_failed supplier={supplier.id} url={url} error={result.error}")
        try:
            record_probe(supplier.category, result.success, result.response_time_ms)
        except Exception as exc:  # 指标失败不影响主流程
            logger.debug(f"probe_metrics_failed err={exc}")
        return result


__all__ = ["HealthProber", "HttpHealthProber", "build_probe_headers", "build_probe_url"]
