"""Bootstrap wiring for metrics."""

from __future__ import annotations

from src.application.ports.task_metrics import TaskMetricsPort
from src.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    TaskEngineMetrics,
    generate_metrics,
    get_task_engine_metrics,
    reset_task_engine_metrics,
)


class PrometheusMetricsExporter:
    """Prometheus metrics exporter implementation."""

    @property
    def content_type(self) -> str:
        return METRICS_CONTENT_TYPE

    def generate_metrics(self) -> bytes:
        return generate_metrics()


_metrics_exporter: PrometheusMetricsExporter | None = None


def get_task_metrics() -> TaskMetricsPort:
    """Get the task metrics sink used by the engine services."""
    return get_task_engine_metrics()


def get_http_metrics() -> TaskEngineMetrics:
    """Get the collector the HTTP middleware records into."""
    return get_task_engine_metrics()


def get_metrics_exporter() -> PrometheusMetricsExporter:
    """Get the metrics exporter instance."""
    global _metrics_exporter
    if _metrics_exporter is None:
        _metrics_exporter = PrometheusMetricsExporter()
    return _metrics_exporter


def reset_metrics() -> None:
    """Reset metrics singletons (testing cleanup)."""
    global _metrics_exporter
    _metrics_exporter = None
    reset_task_engine_metrics()
