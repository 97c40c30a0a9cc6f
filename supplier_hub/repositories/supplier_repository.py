"""
SupplierRepository: 供应商读写

- 同类别激活互斥：先整体取消激活再激活目标，两步在同一事务内提交
- 探测计数由 record_probe_outcome 在库内累加，其余健康字段通过 update_health_fields 回写
- 无进程内缓存，每次读取都回源数据库
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select, update

from supplier_hub.core.logging import logger
from supplier_hub.models.supplier import Supplier, SupplierHealthCheck

from .base import BaseRepository

HEALTH_FIELDS = (
    "is_healthy",
    "last_check_time",
    "response_time_ms",
    "consecutive_failures",
    "uptime_percentage",
    "total_requests",
    "failed_requests",
)


class SupplierRepository(BaseRepository[Supplier]):
    model = Supplier

    async def list_suppliers(self, category: str | None = None) -> list[Supplier]:
        stmt = select(Supplier).execution_options(populate_existing=True)
        if category is not None:
            stmt = stmt.where(Supplier.category == category)
        stmt = stmt.order_by(Supplier.sort_order.asc(), Supplier.name.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Supplier | None:
        result = await self.session.execute(
            select(Supplier)
            .where(Supplier.name == name)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_active(self, category: str) -> Supplier | None:
        result = await self.session.execute(
            select(Supplier)
            .where(Supplier.category == category, Supplier.is_active == True)  # noqa: E712
            .order_by(Supplier.updated_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def count_by_category(self) -> dict[str, int]:
        result = await self.session.execute(
            select(Supplier.category, func.count(Supplier.id)).group_by(Supplier.category)
        )
        return {category: int(count) for category, count in result.all()}

    async def set_active(self, supplier_id: uuid.UUID, is_active: bool) -> bool:
        """
        设置激活状态

        is_active=True 时同类别其余供应商在同一事务内全部取消激活，
        不会出现零个或两个激活的中间态。
        """
        try:
            category = (
                await self.session.execute(
                    select(Supplier.category).where(Supplier.id == supplier_id)
                )
            ).scalar_one_or_none()
            if category is None:
                return False

            if is_active:
                await self.session.execute(
                    update(Supplier)
                    .where(Supplier.category == category, Supplier.id != supplier_id)
                    .values(is_active=False)
                    .execution_options(synchronize_session=False)
                )
            result = await self.session.execute(
                update(Supplier)
                .where(Supplier.id == supplier_id)
                .values(is_active=is_active)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"supplier_activation_changed supplier={supplier_id} category={category} active={is_active}")
        return (result.rowcount or 0) > 0

    async def record_probe_outcome(self, supplier_id: uuid.UUID, is_healthy: bool) -> dict[str, int] | None:
        """
        在库内现值上累加探测计数，返回累加后的计数

        自增写在 UPDATE 语句里，并发探测同一供应商时由数据库写锁串行化；
        不提交，调用方在同一事务内继续回写其余健康字段。
        """
        values: dict[str, Any] = {
            "total_requests": Supplier.total_requests + 1,
            "consecutive_failures": 0 if is_healthy else Supplier.consecutive_failures + 1,
        }
        if not is_healthy:
            values["failed_requests"] = Supplier.failed_requests + 1
        try:
            result = await self.session.execute(
                update(Supplier)
                .where(Supplier.id == supplier_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if not result.rowcount:
                return None
            row = (
                await self.session.execute(
                    select(
                        Supplier.total_requests,
                        Supplier.failed_requests,
                        Supplier.consecutive_failures,
                    ).where(Supplier.id == supplier_id)
                )
            ).one()
        except Exception:
            await self.session.rollback()
            raise
        return dict(row._mapping)

    async def update_health_fields(
        self, supplier_id: uuid.UUID, fields: dict[str, Any], commit: bool = True
    ) -> bool:
        values = {k: v for k, v in fields.items() if k in HEALTH_FIELDS}
        if not values:
            return False
        try:
            result = await self.session.execute(
                update(Supplier)
                .where(Supplier.id == supplier_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if commit:
                await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return (result.rowcount or 0) > 0


class SupplierHealthCheckRepository(BaseRepository[SupplierHealthCheck]):
    model = SupplierHealthCheck

    async def recent(self, supplier_id: uuid.UUID, limit: int = 20) -> list[SupplierHealthCheck]:
        """最近 limit 条记录，按时间正序返回（旧 -> 新）"""
        result = await self.session.execute(
            select(SupplierHealthCheck)
            .where(SupplierHealthCheck.supplier_id == supplier_id)
            .order_by(SupplierHealthCheck.checked_at.desc())
            .limit(limit)
        )
        rows = list(result.scalars().all())
        rows.reverse()
        return rows
