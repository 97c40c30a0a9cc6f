"""
CandidateScorer: 备选供应商打分与择优

总分 = 成功率(40) + 响应时间(30) + 连续失败(20) + 稳定性(10)，四舍五入到整数。
择优只在健康候选中进行，严格更高才替换，同分保留先出现者。
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar

from supplier_hub.schemas.failover import FailoverConfig
from supplier_hub.schemas.health import SupplierHealth

SUCCESS_WEIGHT = 40.0
RESPONSE_WEIGHT = 30.0
FAILURE_WEIGHT = 20.0
STABILITY_WEIGHT = 10.0

# 无样本时的默认分
RESPONSE_DEFAULT = 15.0
STABILITY_DEFAULT = 5.0
MAX_RESPONSE_PENALTY_RATIO = 2.0


@dataclass(frozen=True)
class ScoreBreakdown:
    success: float
    response: float
    failure: float
    stability: float

    @property
    def raw_total(self) -> float:
        return self.success + self.response + self.failure + self.stability

    @property
    def total(self) -> float:
        # 0.5 进位，避免银行家舍入
        return float(math.floor(self.raw_total + 0.5))


def _response_term(response_time_ms: int, max_response_time_ms: int) -> float:
    if response_time_ms <= 0:
        return RESPONSE_DEFAULT
    optimal = max_response_time_ms * 0.5
    if optimal <= 0:
        return 0.0
    if response_time_ms <= optimal:
        return RESPONSE_WEIGHT
    penalty = min((response_time_ms - optimal) / optimal, MAX_RESPONSE_PENALTY_RATIO) * 15.0
    return max(RESPONSE_WEIGHT - penalty, 0.0)


def _failure_term(consecutive_failures: int, max_consecutive_failures: int) -> float:
    if max_consecutive_failures <= 0:
        return 0.0 if consecutive_failures > 0 else FAILURE_WEIGHT
    ratio = consecutive_failures / max_consecutive_failures * FAILURE_WEIGHT
    return FAILURE_WEIGHT - min(ratio, FAILURE_WEIGHT)


def _stability_term(total_requests: int, failed_requests: int) -> float:
    if total_requests <= 0:
        return STABILITY_DEFAULT
    return (1 - failed_requests / total_requests) * STABILITY_WEIGHT


def score_breakdown(health: SupplierHealth, config: FailoverConfig) -> ScoreBreakdown:
    return ScoreBreakdown(
        success=health.uptime_percentage / 100.0 * SUCCESS_WEIGHT,
        response=_response_term(health.response_time_ms, config.max_response_time_ms),
        failure=_failure_term(health.consecutive_failures, config.max_consecutive_failures),
        stability=_stability_term(health.total_requests, health.failed_requests),
    )


def score_candidate(health: SupplierHealth, config: FailoverConfig) -> float:
    return score_breakdown(health, config).total


T = TypeVar("T")


def select_best(
    candidates: Iterable[tuple[T, SupplierHealth]],
    config: FailoverConfig,
) -> tuple[T, float] | None:
    """在健康候选中取最高分；没有健康候选时返回 None"""
    best: tuple[T, float] | None = None
    for item, health in candidates:
        if not health.is_healthy:
            continue
        score = score_candidate(health, config)
        if best is None or score > best[1]:
            best = (item, score)
    return best


__all__ = [
    "ScoreBreakdown",
    "score_breakdown",
    "score_candidate",
    "select_best",
]
