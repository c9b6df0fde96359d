"""Startup and shutdown hooks for the task engine API.

Startup:
1. Configure structured logging from ENVIRONMENT
2. Create the task store schema (PostgreSQL backend only)
3. Record service startup for uptime metrics

Shutdown stops progress watchers and disposes the database engine.

Usage in FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_startup()
        yield
        await run_shutdown()
"""

from structlog import get_logger

from src.bootstrap.logging import configure_logging_from_environment
from src.bootstrap.metrics import get_http_metrics
from src.bootstrap.task_engine import initialize_task_store, shutdown_task_engine

logger = get_logger()


def configure_logging() -> None:
    """Configure structured logging for the application.

    Should be called first in the startup sequence, before any logging occurs.
    """
    environment = configure_logging_from_environment()
    log = get_logger().bind(component="startup_logging")
    log.info("structured_logging_configured", environment=environment)


def record_service_startup(service_name: str = "api") -> None:
    """Record service startup time for uptime tracking."""
    log = logger.bind(component="startup_metrics", service=service_name)
    get_http_metrics().record_startup(service_name)
    log.info("service_startup_recorded")


async def run_startup() -> None:
    configure_logging()
    await initialize_task_store()
    record_service_startup()


async def run_shutdown() -> None:
    await shutdown_task_engine()
    logger.info("service_shutdown_complete")
