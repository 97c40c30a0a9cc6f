"""
SupplierService: 供应商增删改查、校验、导入导出

- 校验在任何写入之前完成，失败不产生部分写入
- 激活状态统一经由仓库的互斥激活接口修改
- 连通性测试只跑探测，不改动健康计数
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.logging import logger
from supplier_hub.models.supplier import Supplier, SupplierCategory
from supplier_hub.repositories import SupplierRepository
from supplier_hub.schemas.supplier import (
    ConnectionTestResult,
    SupplierCreate,
    SupplierExport,
    SupplierStats,
    SupplierUpdate,
)
from supplier_hub.services.errors import NotFoundError, StoreError, SupplierValidationError
from supplier_hub.services.health.prober import HealthProber

VALID_CATEGORIES = {c.value for c in SupplierCategory}


def validate_fields(category: str, name: str, base_url: str, auth_token: str) -> list[str]:
    errors: list[str] = []
    if not (name or "").strip():
        errors.append("供应商名称不能为空")
    if not (base_url or "").strip():
        errors.append("访问URL不能为空")
    elif not (base_url.startswith("http://") or base_url.startswith("https://")):
        errors.append("访问URL格式不正确")
    if not (auth_token or "").strip():
        errors.append("访问密钥不能为空")
    if category not in VALID_CATEGORIES:
        errors.append("供应商类型必须是 'claude' 或 'codex'")
    return errors


class SupplierService:
    def __init__(self, session: AsyncSession, prober: HealthProber | None = None):
        self.session = session
        self.repo = SupplierRepository(session)
        self.prober = prober

    async def _require(self, supplier_id: uuid.UUID) -> Supplier:
        supplier = await self.repo.get(supplier_id)
        if supplier is None:
            raise NotFoundError("供应商不存在")
        return supplier

    async def list_suppliers(self, category: str | None = None) -> list[Supplier]:
        return await self.repo.list_suppliers(category)

    async def get_supplier(self, supplier_id: uuid.UUID) -> Supplier:
        return await self._require(supplier_id)

    async def validate_supplier(
        self, payload: SupplierCreate, exclude_id: uuid.UUID | None = None
    ) -> list[str]:
        errors = validate_fields(payload.category, payload.name, payload.base_url, payload.auth_token)
        if payload.name:
            existing = await self.repo.get_by_name(payload.name)
            if existing is not None and existing.id != exclude_id:
                errors.append(f"供应商名称 '{payload.name}' 已存在")
        return errors

    async def create_supplier(self, payload: SupplierCreate) -> Supplier:
        errors = await self.validate_supplier(payload)
        if errors:
            raise SupplierValidationError("; ".join(errors), errors=errors)
        try:
            supplier = await self.repo.create(self._create_values(payload))
        except IntegrityError as exc:
            await self.session.rollback()
            raise StoreError("创建供应商失败") from exc
        logger.info(f"supplier_created id={supplier.id} category={supplier.category} name={supplier.name}")
        return supplier

    @staticmethod
    def _create_values(payload: SupplierCreate, sort_order: int = 0) -> dict:
        return {
            "category": payload.category,
            "name": payload.name,
            "base_url": payload.base_url,
            "auth_token": payload.auth_token,
            "timeout_ms": payload.timeout_ms,
            "auto_update": bool(payload.auto_update),
            "opus_model": payload.opus_model,
            "sonnet_model": payload.sonnet_model,
            "haiku_model": payload.haiku_model,
            "is_active": False,
            "sort_order": sort_order,
        }

    async def update_supplier(self, supplier_id: uuid.UUID, payload: SupplierUpdate) -> Supplier:
        supplier = await self._require(supplier_id)
        changes = payload.model_dump(exclude_unset=True)
        is_active = changes.pop("is_active", None)
        for required in ("name", "base_url", "auth_token", "sort_order"):
            if changes.get(required, "") is None:
                changes.pop(required)

        merged = SupplierCreate(
            category=supplier.category,
            name=changes.get("name", supplier.name),
            base_url=changes.get("base_url", supplier.base_url),
            auth_token=changes.get("auth_token", supplier.auth_token),
        )
        errors = await self.validate_supplier(merged, exclude_id=supplier_id)
        if errors:
            raise SupplierValidationError("; ".join(errors), errors=errors)

        if "auto_update" in changes:
            changes["auto_update"] = bool(changes["auto_update"])
        if changes:
            try:
                supplier = await self.repo.update(supplier, changes)
            except IntegrityError as exc:
                await self.session.rollback()
                raise StoreError("更新供应商失败") from exc
        if is_active is not None:
            await self.repo.set_active(supplier_id, is_active)
            supplier = await self._require(supplier_id)
        logger.info(f"supplier_updated id={supplier_id} fields={sorted(changes)} active={is_active}")
        return supplier

    async def delete_supplier(self, supplier_id: uuid.UUID) -> bool:
        deleted = await self.repo.delete(supplier_id)
        if deleted is None:
            raise NotFoundError("供应商不存在或删除失败")
        logger.info(f"supplier_deleted id={supplier_id}")
        return True

    async def set_active(self, supplier_id: uuid.UUID, is_active: bool) -> bool:
        await self._require(supplier_id)
        return await self.repo.set_active(supplier_id, is_active)

    async def test_connection(self, supplier_id: uuid.UUID) -> ConnectionTestResult:
        supplier = await self._require(supplier_id)
        if self.prober is None:
            raise RuntimeError("prober is not configured")
        return await self.prober.probe(supplier)

    async def get_stats(self) -> SupplierStats:
        counts = await self.repo.count_by_category()
        active_claude = await self.repo.get_active(SupplierCategory.CLAUDE.value)
        active_codex = await self.repo.get_active(SupplierCategory.CODEX.value)
        claude = counts.get(SupplierCategory.CLAUDE.value, 0)
        codex = counts.get(SupplierCategory.CODEX.value, 0)
        return SupplierStats(
            claude=claude,
            codex=codex,
            total=claude + codex,
            active_claude=active_claude.name if active_claude else None,
            active_codex=active_codex.name if active_codex else None,
        )

    async def import_suppliers(self, payloads: Sequence[SupplierCreate]) -> list[Supplier]:
        """全部校验通过才写入；任一失败则不写入并列出所有错误"""
        errors: list[str] = []
        seen: set[str] = set()
        for payload in payloads:
            item_errors = await self.validate_supplier(payload)
            if payload.name in seen:
                item_errors.append(f"供应商名称 '{payload.name}' 重复")
            seen.add(payload.name)
            errors.extend(f"供应商 '{payload.name}' 验证失败: {e}" for e in item_errors)
        if errors:
            raise SupplierValidationError(f"导入过程中发生错误: {'; '.join(errors)}", errors=errors)

        created: list[Supplier] = []
        try:
            for index, payload in enumerate(payloads):
                created.append(await self.repo.create(self._create_values(payload, index), commit=False))
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise StoreError("导入供应商失败") from exc
        logger.info(f"suppliers_imported count={len(created)}")
        return created

    async def export_suppliers(self) -> list[SupplierExport]:
        suppliers = await self.repo.list_suppliers()
        return [SupplierExport.model_validate(s) for s in suppliers]


__all__ = ["SupplierService", "validate_fields"]
