"""
SwitchOrchestrator: 手动切换与自动故障转移

流程（自动）：
1. 读取类别策略，未启用直接返回
2. 评估当前激活供应商的健康度，判定是否需要转移
3. 评估同类别其余供应商，在健康候选中打分择优
4. 委托给切换原语：备份 -> 互斥激活 -> 失败时按备份回滚

同一类别的决策与切换由 category_locks 串行化；任何路径都返回 SupplierSwitchResult，不向外抛异常。
"""

from __future__ import annotations

import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.locks import category_locks
from supplier_hub.core.logging import logger
from supplier_hub.core.metrics import record_switch
from supplier_hub.models.failover import SwitchReason
from supplier_hub.repositories import SupplierRepository
from supplier_hub.schemas.failover import (
    FailoverStatus,
    SupplierSwitchRequest,
    SupplierSwitchResult,
)
from supplier_hub.services.errors import SupplierHubError
from supplier_hub.services.failover.backup import BackupHook, ConfigHistoryBackupHook
from supplier_hub.services.failover.config_service import FailoverConfigService, ensure_category
from supplier_hub.services.failover.policy import failover_reasons
from supplier_hub.services.failover.progress import SwitchProgressTracker, switch_progress
from supplier_hub.services.failover.scorer import select_best
from supplier_hub.services.health.aggregator import HealthAggregator
from supplier_hub.services.health.prober import HealthProber
from supplier_hub.utils.time_utils import Datetime

STORE_FAILURE_MESSAGE = "Store operation failed"


def _failure(
    message: str,
    *,
    from_id: uuid.UUID | None = None,
    to_id: uuid.UUID | None = None,
    error: str | None = None,
    switch_id: str | None = None,
) -> SupplierSwitchResult:
    return SupplierSwitchResult(
        success=False,
        message=message,
        from_supplier_id=from_id,
        to_supplier_id=to_id,
        switch_time=Datetime.now(),
        rollback_available=False,
        error=error or message,
        switch_id=switch_id,
    )


def _safe_record_switch(category: str, reason: SwitchReason, success: bool) -> None:
    try:
        record_switch(category, reason.value, success)
    except Exception as exc:
        logger.debug(f"switch_metrics_failed err={exc}")


class SwitchOrchestrator:
    def __init__(
        self,
        session: AsyncSession,
        prober: HealthProber,
        backup_hook: BackupHook | None = None,
        tracker: SwitchProgressTracker | None = None,
    ):
        self.session = session
        self.supplier_repo = SupplierRepository(session)
        self.config_service = FailoverConfigService(session)
        self.aggregator = HealthAggregator(session, prober)
        self.backup_hook = backup_hook or ConfigHistoryBackupHook(session)
        self.tracker = tracker or switch_progress

    async def _abort_store(self, exc: Exception) -> None:
        logger.error(f"failover_store_error err={exc!r}")
        try:
            await self.session.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error(f"failover_store_rollback_failed err={rollback_exc!r}")

    # ===== 手动切换 =====

    async def switch(self, request: SupplierSwitchRequest) -> SupplierSwitchResult:
        from_id, to_id = request.from_supplier_id, request.to_supplier_id
        try:
            source = await self.supplier_repo.get(from_id)
            target = await self.supplier_repo.get(to_id)
            if source is None:
                return _failure("Source supplier not found", from_id=from_id, to_id=to_id)
            if target is None:
                return _failure("Target supplier not found", from_id=from_id, to_id=to_id)
            if source.category != target.category:
                return _failure(
                    f"Cannot switch across categories ({source.category} -> {target.category})",
                    from_id=from_id,
                    to_id=to_id,
                )
            category = target.category
            target_name = target.name
        except SQLAlchemyError as exc:
            await self._abort_store(exc)
            return _failure(STORE_FAILURE_MESSAGE, from_id=from_id, to_id=to_id)

        async with category_locks.hold(category):
            return await self._execute(request, category, target_name)

    async def _execute(
        self,
        request: SupplierSwitchRequest,
        category: str,
        target_name: str,
        score: float | None = None,
    ) -> SupplierSwitchResult:
        """切换原语，调用方需持有类别锁"""
        from_id, to_id = request.from_supplier_id, request.to_supplier_id
        reason = request.switch_reason
        progress = self.tracker.start(category, from_id, to_id)
        switch_id = progress.switch_id
        logger.info(
            f"supplier_switch_started switch={switch_id} category={category} "
            f"from={from_id} to={to_id} reason={reason.value}"
        )

        backup_id: uuid.UUID | None = None
        try:
            self.tracker.advance(switch_id, "backup")
            if request.create_backup:
                backup_id = await self.backup_hook.create_backup(category)

            self.tracker.advance(switch_id, "activate", rollback_available=backup_id is not None)
            activated = await self.supplier_repo.set_active(to_id, True)
            error = None if activated else "Target supplier could not be activated"
        except SQLAlchemyError as exc:
            await self._abort_store(exc)
            activated, error = False, STORE_FAILURE_MESSAGE
        except Exception as exc:
            logger.exception(f"supplier_switch_error switch={switch_id} err={exc!r}")
            activated, error = False, str(exc) or type(exc).__name__

        if not activated:
            message = f"Failed to switch to {target_name}"
            if request.rollback_on_failure and backup_id is not None:
                rolled_back = await self._rollback(backup_id)
                message += ", rolled back" if rolled_back else ", rollback failed"
            self.tracker.fail(switch_id, error or message)
            _safe_record_switch(category, reason, False)
            logger.warning(f"supplier_switch_failed switch={switch_id} category={category} error={error}")
            result = _failure(message, from_id=from_id, to_id=to_id, error=error, switch_id=switch_id)
            result.backup_id = backup_id
            result.score = score
            return result

        self.tracker.complete(switch_id)
        _safe_record_switch(category, reason, True)
        logger.info(f"supplier_switch_completed switch={switch_id} category={category} to={to_id}")
        return SupplierSwitchResult(
            success=True,
            message=f"Switched to {target_name}",
            from_supplier_id=from_id,
            to_supplier_id=to_id,
            switch_time=progress.start_time,
            rollback_available=True,
            backup_id=backup_id,
            switch_id=switch_id,
            score=score,
        )

    async def _rollback(self, backup_id: uuid.UUID) -> bool:
        try:
            return await self.backup_hook.rollback(backup_id)
        except SQLAlchemyError as exc:
            await self._abort_store(exc)
        except Exception as exc:
            logger.exception(f"supplier_rollback_error backup={backup_id} err={exc!r}")
        return False

    # ===== 自动故障转移 =====

    async def auto_failover(
        self,
        category: str,
        reason: SwitchReason = SwitchReason.AUTO_FAILOVER,
    ) -> SupplierSwitchResult:
        try:
            ensure_category(category)
        except SupplierHubError as exc:
            return _failure(exc.message)

        async with category_locks.hold(category):
            self.tracker.mark_evaluating(category, True)
            try:
                return await self._auto_failover_locked(category, reason)
            except SQLAlchemyError as exc:
                await self._abort_store(exc)
                return _failure(STORE_FAILURE_MESSAGE)
            except Exception as exc:
                logger.exception(f"auto_failover_error category={category} err={exc!r}")
                return _failure("Auto failover failed", error=str(exc) or type(exc).__name__)
            finally:
                self.tracker.mark_evaluating(category, False)

    async def _auto_failover_locked(self, category: str, reason: SwitchReason) -> SupplierSwitchResult:
        config = await self.config_service.get(category)
        if not config.enabled:
            return _failure(f"Failover is disabled for {category}")

        active = await self.supplier_repo.get_active(category)
        if active is None:
            return _failure(f"No active supplier for {category}")
        active_id, active_name = active.id, active.name

        health = await self.aggregator.assess(active)
        reasons = failover_reasons(health, config)
        if not reasons:
            return SupplierSwitchResult(
                success=False,
                message=f"{active_name} is healthy, no action needed",
                from_supplier_id=active_id,
                switch_time=Datetime.now(),
            )
        logger.warning(
            f"failover_triggered category={category} supplier={active_id} reasons={'; '.join(reasons)}"
        )

        backups = [s for s in await self.supplier_repo.list_suppliers(category) if s.id != active_id]
        candidates = []
        names: dict[uuid.UUID, str] = {}
        for supplier in backups:
            names[supplier.id] = supplier.name
            candidates.append((supplier.id, await self.aggregator.assess(supplier)))

        best = select_best(candidates, config)
        if best is None:
            _safe_record_switch(category, reason, False)
            logger.warning(f"failover_no_candidate category={category} active={active_id}")
            return _failure(
                f"No healthy backup supplier available for {category}",
                from_id=active_id,
            )

        to_id, score = best
        logger.info(f"failover_switch_selected category={category} to={to_id} score={score}")
        request = SupplierSwitchRequest(
            from_supplier_id=active_id,
            to_supplier_id=to_id,
            switch_reason=reason,
            create_backup=config.auto_rollback,
            rollback_on_failure=config.auto_rollback,
        )
        return await self._execute(request, category, names[to_id], score=score)

    # ===== 状态 =====

    async def status(self, category: str) -> FailoverStatus:
        ensure_category(category)
        config = await self.config_service.get(category)
        active = await self.supplier_repo.get_active(category)
        return FailoverStatus(
            category=category,
            active_supplier_id=active.id if active else None,
            active_supplier_name=active.name if active else None,
            is_transitioning=self.tracker.is_transitioning(category) or category_locks.is_locked(category),
            current_switch=self.tracker.current(category),
            config=config,
        )


__all__ = ["SwitchOrchestrator"]
