"""Health check endpoint."""

from fastapi import APIRouter

from src.api.models.health import HealthResponse
from src.config.task_engine_config import TaskStoreConfig

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return health status.

    Returns:
        Health status with 200 OK and the configured store backend.
    """
    return HealthResponse(
        status="healthy", store=TaskStoreConfig.from_environment().backend
    )
