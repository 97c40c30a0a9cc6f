import re
from uuid import uuid4

from fastapi import Request, Response

from supplier_hub.core.config import settings
from supplier_hub.core.logging import logger

# 只接受短的字母数字 id，其余情况重新生成，避免把任意请求头内容写进日志与响应头
TRACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def resolve_trace_id(header_value: str | None) -> str:
    if header_value and TRACE_ID_PATTERN.match(header_value):
        return header_value
    return uuid4().hex


async def trace_middleware(request: Request, call_next):
    """
    追踪 ID 中间件
    - 桌面端前端可携带 TRACE_ID_HEADER，否则生成一个
    - trace id 绑定到本次请求内的日志上下文
    """
    trace_id = resolve_trace_id(request.headers.get(settings.TRACE_ID_HEADER))
    request.state.trace_id = trace_id

    with logger.contextualize(trace_id=trace_id):
        response: Response = await call_next(request)
    response.headers[settings.TRACE_ID_HEADER] = trace_id
    return response
