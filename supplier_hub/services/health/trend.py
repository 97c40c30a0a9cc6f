from __future__ import annotations

from collections.abc import Sequence

from supplier_hub.models.supplier import SupplierHealthCheck
from supplier_hub.schemas.health import PerformanceAnalysis

MIN_SAMPLES = 3
TREND_WINDOW = 3


def _avg(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def analyze_trend(history: Sequence[SupplierHealthCheck]) -> PerformanceAnalysis | None:
    """
    基于最近的健康检查记录（旧 -> 新）给出性能走势

    少于 3 条返回 None；不少于 6 条时比较最近 3 次与之前 3 次的平均响应时间。
    """
    if len(history) < MIN_SAMPLES:
        return None

    response_times = [float(h.response_time_ms or 0) for h in history]
    success_rate = sum(1 for h in history if h.is_healthy) / len(history) * 100.0
    uptime = _avg([float(h.uptime_percentage or 0.0) for h in history])

    trend = "stable"
    if len(history) >= TREND_WINDOW * 2:
        recent = _avg(response_times[-TREND_WINDOW:])
        previous = _avg(response_times[-TREND_WINDOW * 2 : -TREND_WINDOW])
        if recent < previous * 0.9:
            trend = "improving"
        elif recent > previous * 1.1:
            trend = "degrading"

    if trend == "degrading":
        recommendation = "性能下降，建议检查供应商状态或考虑切换"
    elif trend == "improving":
        recommendation = "性能改善，供应商运行良好"
    else:
        recommendation = "性能稳定，继续监控"
    if success_rate < 90:
        recommendation += "；成功率偏低，需要关注"

    return PerformanceAnalysis(
        sample_size=len(history),
        average_response_time_ms=int(round(_avg(response_times))),
        success_rate=round(success_rate, 2),
        uptime_percentage=round(uptime, 2),
        trend=trend,
        recommendation=recommendation,
    )


__all__ = ["analyze_trend"]
