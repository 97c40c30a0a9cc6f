"""
故障转移判定

纯函数，无副作用。config.enabled 为 False 时由调用方直接跳过，不进入这里。
"""

from __future__ import annotations

from supplier_hub.schemas.failover import FailoverConfig
from supplier_hub.schemas.health import SupplierHealth

SUCCESS_RATE_HARD_MARGIN = 10.0


def failover_reasons(health: SupplierHealth, config: FailoverConfig) -> list[str]:
    """列出命中的条件，便于日志与结果说明"""
    reasons: list[str] = []
    if health.consecutive_failures >= config.max_consecutive_failures:
        reasons.append(
            f"consecutive_failures {health.consecutive_failures} >= {config.max_consecutive_failures}"
        )
    if (
        health.response_time_ms > config.max_response_time_ms
        and health.uptime_percentage < config.min_success_rate
    ):
        reasons.append(
            f"response_time {health.response_time_ms}ms > {config.max_response_time_ms}ms "
            f"with uptime {health.uptime_percentage:.2f}% < {config.min_success_rate}%"
        )
    if health.uptime_percentage < config.min_success_rate - SUCCESS_RATE_HARD_MARGIN:
        reasons.append(
            f"uptime {health.uptime_percentage:.2f}% < {config.min_success_rate - SUCCESS_RATE_HARD_MARGIN}%"
        )
    if not health.is_healthy:
        reasons.append("probe failed")
    return reasons


def should_failover(health: SupplierHealth, config: FailoverConfig) -> bool:
    return bool(failover_reasons(health, config))


__all__ = ["failover_reasons", "should_failover"]
