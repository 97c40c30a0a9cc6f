"""
切换前备份 / 失败后回滚

ConfigHistoryBackupHook 把某类别当前激活的供应商写入 config_history，
回滚时按快照恢复激活状态，并追加一条 restore 记录。
"""

from __future__ import annotations

import uuid
from typing import Protocol

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_hub.core.logging import logger
from supplier_hub.models.supplier import Supplier
from supplier_hub.repositories import ConfigHistoryRepository, SupplierRepository

BACKUP_CONFIG_PATH = "supplier.active"


class BackupHook(Protocol):
    async def create_backup(self, category: str) -> uuid.UUID | None: ...

    async def rollback(self, backup_id: uuid.UUID) -> bool: ...


class NullBackupHook:
    async def create_backup(self, category: str) -> uuid.UUID | None:
        return None

    async def rollback(self, backup_id: uuid.UUID) -> bool:
        return False


class ConfigHistoryBackupHook:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.history_repo = ConfigHistoryRepository(session)
        self.supplier_repo = SupplierRepository(session)

    async def create_backup(self, category: str) -> uuid.UUID | None:
        active = await self.supplier_repo.get_active(category)
        content = {
            "category": category,
            "active_supplier_id": str(active.id) if active else None,
            "active_supplier_name": active.name if active else None,
        }
        record = await self.history_repo.create(
            {
                "config_type": category,
                "config_path": BACKUP_CONFIG_PATH,
                "backup_content": content,
                "operation_type": "backup",
                "description": f"切换前备份 ({content['active_supplier_name'] or '无激活供应商'})",
            }
        )
        logger.info(f"supplier_backup_created category={category} backup={record.id} active={content['active_supplier_id']}")
        return record.id

    async def rollback(self, backup_id: uuid.UUID) -> bool:
        backup = await self.history_repo.get(backup_id)
        if backup is None or backup.operation_type != "backup":
            logger.warning(f"supplier_rollback_missing backup={backup_id}")
            return False

        content = dict(backup.backup_content or {})
        category = content.get("category") or backup.config_type
        raw_id = content.get("active_supplier_id")

        if raw_id:
            restored = await self.supplier_repo.set_active(uuid.UUID(raw_id), True)
            if not restored:
                logger.warning(f"supplier_rollback_target_gone backup={backup_id} supplier={raw_id}")
                return False
        else:
            # 备份时该类别没有激活供应商，回滚即全部取消激活
            await self.session.execute(
                update(Supplier)
                .where(Supplier.category == category)
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()

        await self.history_repo.create(
            {
                "config_type": category,
                "config_path": BACKUP_CONFIG_PATH,
                "backup_content": content,
                "operation_type": "restore",
                "description": f"从备份 {backup_id} 恢复",
            }
        )
        logger.info(f"supplier_rollback_done category={category} backup={backup_id} active={raw_id}")
        return True


__all__ = ["BackupHook", "ConfigHistoryBackupHook", "NullBackupHook"]
