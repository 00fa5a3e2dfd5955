from .demo import DemoMetricGenerator, generate_demo_metric
from .prometheus import CONTENT_TYPE, render_prometheus
from .store import MetricsStore

__all__ = [
    "CONTENT_TYPE",
    "DemoMetricGenerator",
    "MetricsStore",
    "generate_demo_metric",
    "render_prometheus",
]
