"""
按供应商类别串行化的进程内锁

桌面端为单进程，多个命令以并发任务运行；同一类别的故障转移决策与切换必须串行，
不同类别互不阻塞。
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from supplier_hub.core.logging import logger


class CategoryLockRegistry:
    """每个事件循环、每个类别一把 asyncio.Lock"""

    def __init__(self) -> None:
        self._locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, dict[str, asyncio.Lock]
        ] = weakref.WeakKeyDictionary()

    def get(self, category: str) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        per_loop = self._locks.get(loop)
        if per_loop is None:
            per_loop = {}
            self._locks[loop] = per_loop
        lock = per_loop.get(category)
        if lock is None:
            lock = asyncio.Lock()
            per_loop[category] = lock
        return lock

    def is_locked(self, category: str) -> bool:
        return self.get(category).locked()

    @asynccontextmanager
    async def hold(self, category: str) -> AsyncGenerator[None, None]:
        """
        上下文管理器用法

        async with category_locks.hold("claude"):
            # 临界区：读取激活状态 -> 决策 -> 切换
            ...
        """
        lock = self.get(category)
        if lock.locked():
            logger.debug(f"category_lock_waiting category={category}")
        async with lock:
            yield


category_locks = CategoryLockRegistry()
