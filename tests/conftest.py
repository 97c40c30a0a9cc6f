"""
测试全局配置

- 关闭文件日志与异步日志队列，避免测试进程退出时残留线程
- 每个用例使用独立的内存 SQLite (aiosqlite + StaticPool)
- ScriptedProber 按供应商名称返回预设探测结果
"""
from __future__ import annotations

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("LOG_FILE_PATH", "")
os.environ.setdefault("LOG_ASYNC", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("HEALTH_MONITOR_ENABLED", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from supplier_hub.core.database import build_engine, build_sessionmaker, init_db
from supplier_hub.models import Supplier
from supplier_hub.schemas import ConnectionTestResult
from supplier_hub.services.failover.progress import switch_progress


def ok(response_time_ms: int = 100) -> ConnectionTestResult:
    return ConnectionTestResult(success=True, response_time_ms=response_time_ms, status_code=200)


def fail(error: str = "connection refused", response_time_ms: int | None = None) -> ConnectionTestResult:
    return ConnectionTestResult(success=False, response_time_ms=response_time_ms, error=error)


class ScriptedProber:
    """
    确定性探测器替身

    outcomes 以供应商名称为键，值可以是单个结果、结果列表（依次返回，最后一个重复）或异常。
    """

    def __init__(self, outcomes: dict[str, Any] | None = None, default: Any = None):
        self.outcomes = dict(outcomes or {})
        self.default = default if default is not None else ok()
        self.calls: list[str] = []

    async def probe(self, supplier: Supplier) -> ConnectionTestResult:
        self.calls.append(supplier.name)
        outcome = self.outcomes.get(supplier.name, self.default)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


async def make_supplier(
    session: AsyncSession,
    name: str,
    category: str = "claude",
    **fields: Any,
) -> Supplier:
    values = {
        "category": category,
        "name": name,
        "base_url": f"https://{name.lower()}.example.com",
        "auth_token": f"sk-{name.lower()}-0123456789",
        "timeout_ms": 3000,
        **fields,
    }
    supplier = Supplier(**values)
    session.add(supplier)
    await session.commit()
    await session.refresh(supplier)
    return supplier


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as sess:
        yield sess


@pytest.fixture
def prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture(autouse=True)
def _reset_switch_progress():
    switch_progress.clear()
    yield
    switch_progress.clear()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """文件库：并发用例需要多个连接看到同一份数据"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'supplier_hub.db'}", echo=False)
    await init_db(engine)
    yield build_sessionmaker(engine)
    await engine.dispose()
