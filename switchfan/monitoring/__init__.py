# monitoring/__init__.py
from .metrics import MetricsSink, PrometheusMetrics

__all__ = ['MetricsSink', 'PrometheusMetrics']
