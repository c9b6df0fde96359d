"""Prometheus metrics infrastructure.

Operational HTTP metrics plus the task engine counters. ``TaskEngineMetrics``
implements TaskMetricsPort so services record counters without importing
prometheus_client.

Labels: every metric carries ``service`` and ``environment``.
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Histogram buckets for request duration (10ms to 10s)
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class TaskEngineMetrics:
    """Collects and manages Prometheus metrics for the task engine.

    Attributes:
        uptime_seconds: Gauge tracking seconds since service start.
        http_request_duration_seconds: Histogram for request latency.
        http_requests_total: Counter for all HTTP requests.
        http_requests_failed_total: Counter for 4xx/5xx responses.
        task_activities_total: Activities appended, by type.
        tasks_auto_split_total: Tasks split into successors.
        recurring_tasks_generated_total: Successors created by recurrence.
        batch_task_failures_total: Per-task batch failures, by operation.
        time_budget_advisories_total: Budget advisories, by level.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self.startup_times: dict[str, float] = {}
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "task-engine")

        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since service start",
            labelnames=["service", "environment"],
            registry=self._registry,
        )
        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            documentation="HTTP request duration in seconds",
            labelnames=["service", "environment", "method", "endpoint"],
            buckets=DEFAULT_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )
        self.http_requests_total = Counter(
            name="http_requests_total",
            documentation="Total HTTP requests",
            labelnames=["service", "environment", "method", "endpoint", "status"],
            registry=self._registry,
        )
        self.http_requests_failed_total = Counter(
            name="http_requests_failed_total",
            documentation="Total failed HTTP requests (4xx, 5xx)",
            labelnames=[
                "service",
                "environment",
                "method",
                "endpoint",
                "status",
                "error_type",
            ],
            registry=self._registry,
        )

        self.task_activities_total = Counter(
            name="task_activities_total",
            documentation="Activities appended to task audit trails",
            labelnames=["service", "environment", "type"],
            registry=self._registry,
        )
        self.tasks_auto_split_total = Counter(
            name="tasks_auto_split_total",
            documentation="Tasks split into two successors after overrunning their budget",
            labelnames=["service", "environment"],
            registry=self._registry,
        )
        self.recurring_tasks_generated_total = Counter(
            name="recurring_tasks_generated_total",
            documentation="Tasks created by the recurrence generator",
            labelnames=["service", "environment"],
            registry=self._registry,
        )
        self.batch_task_failures_total = Counter(
            name="batch_task_failures_total",
            documentation="Tasks a batch operation could not apply",
            labelnames=["service", "environment", "operation"],
            registry=self._registry,
        )
        self.time_budget_advisories_total = Counter(
            name="time_budget_advisories_total",
            documentation="Time budget advisories dispatched",
            labelnames=["service", "environment", "level"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    # TaskMetricsPort

    def record_activity(self, activity_type: str) -> None:
        self.task_activities_total.labels(**self._labels(), type=activity_type).inc()

    def record_auto_split(self) -> None:
        self.tasks_auto_split_total.labels(**self._labels()).inc()

    def record_recurring_generated(self, count: int) -> None:
        if count > 0:
            self.recurring_tasks_generated_total.labels(**self._labels()).inc(count)

    def record_batch_failure(self, operation: str) -> None:
        self.batch_task_failures_total.labels(
            **self._labels(), operation=operation
        ).inc()

    def record_budget_advisory(self, level: str) -> None:
        self.time_budget_advisories_total.labels(**self._labels(), level=level).inc()

    # HTTP

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        self.http_request_duration_seconds.labels(
            **self._labels(), method=method, endpoint=endpoint
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            **self._labels(), method=method, endpoint=endpoint, status=status
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str
    ) -> None:
        self.http_requests_failed_total.labels(
            **self._labels(),
            method=method,
            endpoint=endpoint,
            status=status,
            error_type=error_type,
        ).inc()

    # Uptime

    def record_startup(self, service: str) -> None:
        """Record service startup time."""
        self.startup_times[service] = time.time()

    def get_uptime_seconds(self, service: str) -> float:
        """Uptime in seconds, or 0.0 if the service never started."""
        if service not in self.startup_times:
            return 0.0
        return time.time() - self.startup_times[service]

    def update_uptime_gauges(self) -> None:
        for service in self.startup_times:
            self.uptime_seconds.labels(
                service=service, environment=self._environment
            ).set(self.get_uptime_seconds(service))

    def get_registry(self) -> CollectorRegistry:
        return self._registry


_metrics: TaskEngineMetrics | None = None


def get_task_engine_metrics() -> TaskEngineMetrics:
    """Get the singleton TaskEngineMetrics instance (thread-safe)."""
    global _metrics
    if _metrics is None:
        with _collector_lock:
            # Double-check inside lock
            if _metrics is None:
                _metrics = TaskEngineMetrics()
    return _metrics


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format."""
    metrics = get_task_engine_metrics()
    metrics.update_uptime_gauges()
    return generate_latest(metrics.get_registry())


def reset_task_engine_metrics() -> None:
    """Reset the singleton (for testing only)."""
    global _metrics
    with _collector_lock:
        _metrics = None
