# monitoring/metrics.py
"""
Gauges republished for Prometheus.

The controller writes through a MetricsSink so it never touches a global registry.
"""

from typing import Optional, Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, Gauge


@runtime_checkable
class MetricsSink(Protocol):
    def set_temperature(self, temperature: int) -> None:
        ...

    def set_relay_state(self, on: bool) -> None:
        ...


class PrometheusMetrics:
    """Switch temperature and plug relay state, last value wins"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.switch_temperature = Gauge(
            "switch_temperature",
            "Current temperature of the switch",
            registry=self.registry,
        )
        self.relay_state = Gauge(
            "hs1xx_relay_state",
            "Plug On or Off state",
            registry=self.registry,
        )

    def set_temperature(self, temperature: int) -> None:
        self.switch_temperature.set(temperature)

    def set_relay_state(self, on: bool) -> None:
        self.relay_state.set(1 if on else 0)
