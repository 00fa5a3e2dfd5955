from .metrics import AggregateView, MetricRecord, ProviderGroupStats, now_ms
from .provider import NormalizedResult, ProviderConfig

__all__ = [
    "AggregateView",
    "MetricRecord",
    "NormalizedResult",
    "ProviderConfig",
    "ProviderGroupStats",
    "now_ms",
]
