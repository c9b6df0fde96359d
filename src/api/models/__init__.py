"""
API models (Pydantic DTOs) for the task lifecycle engine.

This module contains all Pydantic request/response models
used by API endpoints.
"""

from src.api.models.health import HealthResponse
from src.api.models.task import (
    CreateTaskRequest,
    TaskErrorResponse,
    TaskResponse,
    UpdateTaskRequest,
)

__all__: list[str] = [
    "CreateTaskRequest",
    "HealthResponse",
    "TaskErrorResponse",
    "TaskResponse",
    "UpdateTaskRequest",
]
