"""Infrastructure monitoring components.

Prometheus metrics for HTTP traffic and task engine activity.
"""

from src.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    TaskEngineMetrics,
    generate_metrics,
    get_task_engine_metrics,
    reset_task_engine_metrics,
)

__all__: list[str] = [
    "METRICS_CONTENT_TYPE",
    "TaskEngineMetrics",
    "generate_metrics",
    "get_task_engine_metrics",
    "reset_task_engine_metrics",
]
