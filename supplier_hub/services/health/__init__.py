from .aggregator import HealthAggregator, build_health_fields, derive_status
from .prober import HealthProber, HttpHealthProber
from .trend import analyze_trend

__all__ = [
    "HealthAggregator",
    "HealthProber",
    "HttpHealthProber",
    "analyze_trend",
    "build_health_fields",
    "derive_status",
]
