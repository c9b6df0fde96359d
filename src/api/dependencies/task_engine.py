"""Task engine API dependencies.

Routes receive the engine through ``Depends(get_task_engine)``. Tests swap
the wiring with ``set_task_engine`` or ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Header

from src.application.services.task_engine import TaskEngine
from src.bootstrap.task_engine import get_task_engine as _get_task_engine

ACTOR_HEADER = "X-User-ID"


def get_task_engine() -> TaskEngine:
    """Get the task engine instance."""
    return _get_task_engine()


def get_actor_id(
    x_user_id: Annotated[
        str | None,
        Header(alias=ACTOR_HEADER, description="Acting user, used in activity narration"),
    ] = None,
) -> str | None:
    """Extract the acting user's id; anonymous requests narrate as "User"."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()
