from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from supplier_hub.core.metrics import metrics_content

router = APIRouter(tags=["Metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """请求、探测与切换指标（私有注册表，不含进程默认采集器）"""
    return Response(content=metrics_content(), media_type=CONTENT_TYPE_LATEST)
