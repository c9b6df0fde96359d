"""API dependencies for dependency injection."""

from src.api.dependencies.correlation import get_correlation_id_header
from src.api.dependencies.task_engine import get_actor_id, get_task_engine

__all__: list[str] = [
    "get_actor_id",
    "get_correlation_id_header",
    "get_task_engine",
]
