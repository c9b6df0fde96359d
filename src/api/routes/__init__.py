"""
API routes for the task lifecycle engine.

Available routers:
- health: Health check endpoints
- metrics: Prometheus scrape endpoint
- tasks: Task lifecycle endpoints, scoped per owner
"""

from src.api.routes.health import router as health_router
from src.api.routes.metrics import router as metrics_router
from src.api.routes.tasks import router as tasks_router

__all__: list[str] = ["health_router", "metrics_router", "tasks_router"]
