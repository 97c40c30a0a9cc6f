from __future__ import annotations

from typing import Any

import httpx


def create_async_http_client(
    *,
    timeout: float | httpx.Timeout | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    创建探测用的 httpx.AsyncClient。

    - transport 可注入（测试使用 httpx.MockTransport）。
    - 不跟随重定向：3xx 已足以说明上游可达。
    """
    client_kwargs.setdefault("follow_redirects", False)
    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        **client_kwargs,
    )
