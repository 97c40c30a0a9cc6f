"""
AI Tools Supplier Hub - FastAPI Application Entry Point

启动命令:
    uvicorn supplier_hub.main:app --reload --host 127.0.0.1 --port 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from supplier_hub.core import init_db, settings, setup_logging
from supplier_hub.middleware.metrics import metrics_middleware
from supplier_hub.middleware.trace import trace_middleware
from supplier_hub.schemas import ApiResponse
from supplier_hub.services.errors import SupplierHubError
from supplier_hub.services.failover.monitor import HealthMonitor

# 设置日志
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    from supplier_hub.core.logging import logger

    logger.info(f"application_startup project={settings.PROJECT_NAME} env={settings.ENVIRONMENT}")
    await init_db()

    monitor: HealthMonitor | None = None
    if settings.HEALTH_MONITOR_ENABLED:
        monitor = HealthMonitor()
        monitor.start()
    app.state.health_monitor = monitor

    yield

    if monitor is not None:
        await monitor.stop()
    logger.info("application_shutdown")


async def supplier_hub_error_handler(request: Request, exc: SupplierHubError) -> JSONResponse:
    body = ApiResponse.error(exc.message, data={"errors": exc.errors} if exc.errors else None)
    return JSONResponse(status_code=200, content=body.model_dump(mode="json"))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    from supplier_hub.core.logging import logger

    # 具体错误只进日志，信封里只给通用提示
    logger.error(f"store_error path={request.url.path} err={exc!r}")
    body = ApiResponse.error("Store operation failed")
    return JSONResponse(status_code=200, content=body.model_dump(mode="json"))


def create_app() -> FastAPI:
    """创建 FastAPI 应用"""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    # 全局中间件：顺序为追踪 -> 指标 -> CORS
    app.middleware("http")(trace_middleware)
    app.middleware("http")(metrics_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SupplierHubError, supplier_hub_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    # 注册路由
    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """注册所有 API 路由"""
    from supplier_hub.api.metrics_route import router as metrics_router
    from supplier_hub.api.v1 import failover_router, suppliers_router

    api_prefix = settings.API_V1_STR

    app.include_router(suppliers_router, prefix=api_prefix, tags=["Suppliers"])
    app.include_router(failover_router, prefix=api_prefix, tags=["Failover"])
    # Metrics
    app.include_router(metrics_router, tags=["Metrics"])


# 创建应用实例
app = create_app()


def run():
    """脚本入口点"""
    import uvicorn

    uvicorn.run(
        "supplier_hub.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
