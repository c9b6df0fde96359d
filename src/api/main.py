"""FastAPI application entry point for the task lifecycle engine."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import os

import uvicorn
from fastapi import FastAPI

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.middleware.metrics_middleware import MetricsMiddleware
from src.api.routes.health import router as health_router
from src.api.routes.metrics import router as metrics_router
from src.api.routes.tasks import router as tasks_router
from src.api.startup import run_shutdown, run_startup


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await run_startup()
    yield
    await run_shutdown()


def create_app() -> FastAPI:
    """Build the application with routers and middleware installed."""
    application = FastAPI(
        title="Task Lifecycle Engine API",
        description="Task status, timing, recurrence and audit trail",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Last added runs outermost
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(MetricsMiddleware)
    application.include_router(health_router)
    application.include_router(metrics_router)
    application.include_router(tasks_router)
    return application


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on API_HOST:API_PORT (default 0.0.0.0:8000)."""
    uvicorn.run(
        "src.api.main:app",
        host=os.environ.get("API_HOST", "0.0.0.0"),
        port=int(os.environ.get("API_PORT", "8000")),
    )
