from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from supplier_hub.core.config import settings


def build_engine(db_url: str, **overrides) -> AsyncEngine:
    """
    创建异步引擎

    SQLite 下打开外键约束（删除供应商时级联清理健康检查记录）。
    """
    engine_kwargs = {
        "echo": settings.DEBUG,
        "future": True,
        "pool_pre_ping": True,
    }
    if db_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(pool_size=20, max_overflow=10)
    engine_kwargs.update(overrides)

    async_engine = create_async_engine(db_url, **engine_kwargs)

    if db_url.startswith("sqlite"):
        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# 创建异步引擎（进程内共享连接池）
engine = build_engine(settings.DATABASE_URL)

# 创建异步 Session 工厂
AsyncSessionLocal = build_sessionmaker(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """建表（桌面端首次启动即自举，不走迁移）"""
    from supplier_hub.models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 依赖项: 获取数据库 Session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
