# web/server.py
"""
Scrape endpoint for the controller's gauges.

Only /metrics is served; the web thread reads the gauges while the control loop writes them.
"""

import logging
import threading
from typing import Optional

from flask import Flask, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from werkzeug.serving import BaseWSGIServer, make_server

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 9116  # same port as the Prometheus snmp_exporter


def create_metrics_app(registry: CollectorRegistry) -> Flask:
    app = Flask(__name__)

    @app.route('/metrics')
    def metrics_endpoint():
        """Prometheus text exposition of the registry"""
        return Response(generate_latest(registry), headers={"Content-Type": CONTENT_TYPE_LATEST})

    return app


class MetricsWebServer:
    """Serves /metrics from a background thread"""

    def __init__(self, registry: CollectorRegistry, host: str = "0.0.0.0", port: int = DEFAULT_METRICS_PORT):
        self.host = host
        self.port = port
        self.app = create_metrics_app(registry)
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    def start_background(self):
        """Bind the port and start serving in a daemon thread"""
        self._server = make_server(self.host, self.port, self.app, threaded=True)
        self.port = self._server.server_port
        self._thread = threading.Thread(target=self._server.serve_forever, name="metrics-web", daemon=True)
        self._thread.start()
        logger.info(f"Metrics web server listening on http://{self.host}:{self.port}/metrics")

    def stop(self):
        if self._server is None:
            return
        self._server.shutdown()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server.server_close()
        self._server = None
        self._thread = None
        logger.info("Metrics web server stopped")
