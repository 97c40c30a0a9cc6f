from .metrics import metrics_middleware
from .trace import trace_middleware

__all__ = ["metrics_middleware", "trace_middleware"]
