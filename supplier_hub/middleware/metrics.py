from fastapi import Request

from supplier_hub.core.logging import logger
from supplier_hub.core.metrics import RequestTimer, record_request


async def metrics_middleware(request: Request, call_next):
    timer = RequestTimer()
    response = await call_next(request)
    # 使用路由模板而不是原始路径，避免供应商 id 撑爆标签基数
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    try:
        record_request(
            path=path,
            method=request.method,
            status=response.status_code,
            duration_seconds=timer.seconds(),
        )
    except Exception as exc:
        logger.debug(f"request_metrics_failed err={exc}")
    return response
