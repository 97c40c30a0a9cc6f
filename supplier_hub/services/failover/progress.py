"""
SwitchProgressTracker: 进程内的切换进度表

每个类别同一时间最多一个进行中的切换；完成或失败后保留最近一次的记录以便查询。
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from supplier_hub.schemas.failover import SupplierSwitchProgress
from supplier_hub.utils.time_utils import Datetime

SWITCH_STEPS = ("validate", "backup", "activate", "complete")
# 单步预估耗时，用于 estimated_completion
STEP_ESTIMATE = timedelta(milliseconds=500)
MAX_FINISHED = 100


class SwitchProgressTracker:
    def __init__(self) -> None:
        self._by_id: dict[str, SupplierSwitchProgress] = {}
        self._by_category: dict[str, str] = {}
        self._evaluating: set[str] = set()

    def start(
        self,
        category: str,
        from_supplier: uuid.UUID | None,
        to_supplier: uuid.UUID | None,
    ) -> SupplierSwitchProgress:
        now = Datetime.now()
        progress = SupplierSwitchProgress(
            switch_id=uuid.uuid4().hex,
            category=category,
            total_steps=len(SWITCH_STEPS),
            completed_steps=0,
            overall_progress=0,
            current_step=SWITCH_STEPS[0],
            from_supplier=from_supplier,
            to_supplier=to_supplier,
            start_time=now,
            estimated_completion=now + STEP_ESTIMATE * len(SWITCH_STEPS),
        )
        self._by_id[progress.switch_id] = progress
        self._by_category[category] = progress.switch_id
        self._prune()
        return progress

    def advance(self, switch_id: str, step: str, *, rollback_available: bool | None = None) -> None:
        progress = self._by_id.get(switch_id)
        if progress is None or progress.is_completed:
            return
        completed = SWITCH_STEPS.index(step)
        progress.current_step = step
        progress.completed_steps = completed
        progress.overall_progress = int(completed * 100 / progress.total_steps)
        if rollback_available is not None:
            progress.rollback_available = rollback_available

    def complete(self, switch_id: str) -> None:
        progress = self._by_id.get(switch_id)
        if progress is None:
            return
        progress.current_step = SWITCH_STEPS[-1]
        progress.completed_steps = progress.total_steps
        progress.overall_progress = 100
        progress.is_completed = True
        progress.estimated_completion = Datetime.now()

    def fail(self, switch_id: str, error: str, *, rollback_available: bool = False) -> None:
        progress = self._by_id.get(switch_id)
        if progress is None:
            return
        progress.has_error = True
        progress.error_message = error
        progress.is_completed = True
        progress.rollback_available = rollback_available
        progress.estimated_completion = Datetime.now()

    def get(self, switch_id: str) -> SupplierSwitchProgress | None:
        return self._by_id.get(switch_id)

    def latest(self, category: str) -> SupplierSwitchProgress | None:
        switch_id = self._by_category.get(category)
        return self._by_id.get(switch_id) if switch_id else None

    def current(self, category: str) -> SupplierSwitchProgress | None:
        progress = self.latest(category)
        if progress is None or progress.is_completed:
            return None
        return progress

    def mark_evaluating(self, category: str, value: bool) -> None:
        if value:
            self._evaluating.add(category)
        else:
            self._evaluating.discard(category)

    def is_transitioning(self, category: str) -> bool:
        return category in self._evaluating or self.current(category) is not None

    def clear(self) -> None:
        self._by_id.clear()
        self._by_category.clear()
        self._evaluating.clear()

    def _prune(self) -> None:
        if len(self._by_id) <= MAX_FINISHED:
            return
        live = set(self._by_category.values())
        for switch_id in list(self._by_id):
            if len(self._by_id) <= MAX_FINISHED:
                break
            if switch_id not in live and self._by_id[switch_id].is_completed:
                self._by_id.pop(switch_id, None)


switch_progress = SwitchProgressTracker()

__all__ = ["SWITCH_STEPS", "SwitchProgressTracker", "switch_progress"]
