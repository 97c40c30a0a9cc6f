"""
v1 路由聚合
"""

from supplier_hub.api.v1.failover_route import router as failover_router
from supplier_hub.api.v1.suppliers_route import router as suppliers_router

__all__ = ["failover_router", "suppliers_router"]
