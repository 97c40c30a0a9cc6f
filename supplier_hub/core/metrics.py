"""
简单 Prometheus 指标封装

目的：
- 记录 HTTP 请求的 SLI（延迟、状态码）
- 记录供应商探测（成功率、延迟）与切换（原因、结果）
"""

from __future__ import annotations

import time

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# 注册表便于单元测试重置
registry = CollectorRegistry()

REQUEST_LATENCY = Histogram(
    "supplier_hub_request_latency_seconds",
    "HTTP 请求耗时",
    ["path", "method", "status"],
    registry=registry,
)
REQUEST_TOTAL = Counter(
    "supplier_hub_request_total",
    "HTTP 请求计数",
    ["path", "method", "status"],
    registry=registry,
)
PROBE_LATENCY = Histogram(
    "supplier_probe_latency_seconds",
    "供应商探测耗时",
    ["category", "success"],
    registry=registry,
)
PROBE_TOTAL = Counter(
    "supplier_probe_total",
    "供应商探测计数",
    ["category", "success"],
    registry=registry,
)
SWITCH_TOTAL = Counter(
    "supplier_switch_total",
    "供应商切换计数",
    ["category", "reason", "success"],
    registry=registry,
)


def record_request(path: str, method: str, status: int, duration_seconds: float) -> None:
    REQUEST_LATENCY.labels(path=path, method=method, status=status).observe(
        duration_seconds
    )
    REQUEST_TOTAL.labels(path=path, method=method, status=status).inc()


def record_probe(category: str, success: bool, latency_ms: float | None) -> None:
    PROBE_TOTAL.labels(category=category, success=str(success)).inc()
    if latency_ms is not None:
        PROBE_LATENCY.labels(category=category, success=str(success)).observe(
            latency_ms / 1000.0
        )


def record_switch(category: str, reason: str, success: bool) -> None:
    SWITCH_TOTAL.labels(category=category, reason=reason, success=str(success)).inc()


def metrics_content() -> bytes:
    """导出 Prometheus 指标"""
    return generate_latest(registry)


class RequestTimer:
    """便捷计时器"""

    def __init__(self) -> None:
        self.start = time.perf_counter()

    def seconds(self) -> float:
        return time.perf_counter() - self.start

    def millis(self) -> int:
        return int((time.perf_counter() - self.start) * 1000)
