# web/__init__.py
from .server import MetricsWebServer, create_metrics_app

__all__ = ['MetricsWebServer', 'create_metrics_app']
