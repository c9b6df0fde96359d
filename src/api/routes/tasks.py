"""Task lifecycle API routes.

FastAPI router exposing the task engine per owner. Engine errors are
mapped to RFC 7807 problem details:
- NotFoundError -> 404
- PermissionDeniedError -> 403
- DependencyBlockedError -> 409
- TaskValidationError -> 400
- StoreUnavailableError -> 503

The acting user is read from the X-User-ID header and only used to
narrate activities.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from src.api.dependencies.task_engine import get_actor_id, get_task_engine
from src.api.models.task import (
    ActivityResponse,
    AnalysisResponse,
    BatchDeleteRequest,
    BatchPriorityRequest,
    BatchResultResponse,
    BatchStatusRequest,
    BatchTagsRequest,
    BreakdownRequest,
    BreakdownResponse,
    CommentListResponse,
    CommentRequest,
    CommentResponse,
    CreateTaskRequest,
    CreateTaskResponse,
    DependencyCheckResponse,
    GuidanceResponse,
    HistoryResponse,
    ProgressResponse,
    ProgressUpdateRequest,
    RecentActivityEntryResponse,
    RecentActivityResponse,
    RecommendationResponse,
    RecommendedTasksResponse,
    ScoredTaskResponse,
    ScoreResponse,
    SplitCheckResponse,
    SplitResponse,
    StatusUpdateRequest,
    TaskErrorResponse,
    TaskListResponse,
    TaskResponse,
    TimerUpdateRequest,
    TimerUpdateResponse,
    UpdateMetadataRequest,
    UpdateTaskRequest,
)
from src.application.services.task_engine import TaskEngine
from src.domain.errors.task import (
    DependencyBlockedError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
    TaskValidationError,
)
from src.domain.exceptions import TaskEngineError

router = APIRouter(prefix="/v1/owners/{owner_id}/tasks", tags=["tasks"])

ERROR_TYPE_BASE = "https://task-engine.dev/errors"

Engine = Annotated[TaskEngine, Depends(get_task_engine)]
ActorId = Annotated[str | None, Depends(get_actor_id)]

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": TaskErrorResponse, "description": "Invalid request"},
    404: {"model": TaskErrorResponse, "description": "Task not found"},
    503: {"model": TaskErrorResponse, "description": "Task store unavailable"},
}


def _problem(exc: TaskEngineError, request: Request) -> HTTPException:
    """Map an engine error to a problem-details HTTPException."""
    # DependencyBlockedError subclasses TaskValidationError; check it first
    if isinstance(exc, DependencyBlockedError):
        code, slug, title = 409, "dependency-blocked", "Dependencies Incomplete"
    elif isinstance(exc, NotFoundError):
        code, slug, title = 404, "not-found", "Not Found"
    elif isinstance(exc, PermissionDeniedError):
        code, slug, title = 403, "permission-denied", "Permission Denied"
    elif isinstance(exc, TaskValidationError):
        code, slug, title = 400, "validation-failed", "Validation Failed"
    elif isinstance(exc, StoreUnavailableError):
        code, slug, title = 503, "store-unavailable", "Task Store Unavailable"
    else:
        code, slug, title = 500, "internal-error", "Internal Error"
    return HTTPException(
        status_code=code,
        detail={
            "type": f"{ERROR_TYPE_BASE}/{slug}",
            "title": title,
            "status": code,
            "detail": str(exc),
            "instance": str(request.url),
        },
    )


# =============================================================================
# Collection
# =============================================================================


@router.get(
    "",
    response_model=TaskListResponse,
    responses=_ERROR_RESPONSES,
    summary="List tasks",
    description=(
        "Return every task of the owner. Due recurring tasks get their next "
        "occurrence generated as part of this call."
    ),
)
async def list_tasks(owner_id: str, request: Request, engine: Engine) -> TaskListResponse:
    try:
        tasks = await engine.fetch_tasks(owner_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TaskListResponse(
        tasks=[TaskResponse.from_task(t) for t in tasks], total=len(tasks)
    )


@router.post(
    "",
    response_model=CreateTaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Create a task",
)
async def create_task(
    owner_id: str,
    request_data: CreateTaskRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> CreateTaskResponse:
    try:
        task_id = await engine.create_task(
            owner_id, request_data.to_task_input(), actor_id=actor_id
        )
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return CreateTaskResponse(task_id=task_id)


@router.get(
    "/activity",
    response_model=RecentActivityResponse,
    responses=_ERROR_RESPONSES,
    summary="Recent activity across the owner's tasks",
)
async def get_recent_activity(
    owner_id: str,
    request: Request,
    engine: Engine,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> RecentActivityResponse:
    try:
        entries = await engine.get_recent_activity(owner_id, limit)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return RecentActivityResponse(
        entries=[RecentActivityEntryResponse.from_entry(e) for e in entries]
    )


@router.get(
    "/recommended",
    response_model=RecommendedTasksResponse,
    responses=_ERROR_RESPONSES,
    summary="Recommended tasks",
    description="Open tasks ordered by personalization score, then priority.",
)
async def get_recommended_tasks(
    owner_id: str,
    request: Request,
    engine: Engine,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> RecommendedTasksResponse:
    try:
        scored = await engine.get_recommended_tasks(owner_id, limit)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return RecommendedTasksResponse(
        items=[ScoredTaskResponse.from_scored(s) for s in scored]
    )


# =============================================================================
# Batch operations
# =============================================================================


@router.post(
    "/batch/status",
    response_model=BatchResultResponse,
    summary="Change status of many tasks",
)
async def batch_update_status(
    owner_id: str,
    request_data: BatchStatusRequest,
    engine: Engine,
    actor_id: ActorId,
) -> BatchResultResponse:
    result = await engine.update_batch_task_status(
        owner_id, request_data.task_ids, request_data.status.to_domain(), actor_id
    )
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/priority",
    response_model=BatchResultResponse,
    summary="Change priority of many tasks",
)
async def batch_update_priority(
    owner_id: str,
    request_data: BatchPriorityRequest,
    engine: Engine,
    actor_id: ActorId,
) -> BatchResultResponse:
    result = await engine.update_batch_task_priority(
        owner_id, request_data.task_ids, request_data.priority.to_domain(), actor_id
    )
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/tags",
    response_model=BatchResultResponse,
    summary="Add tags to many tasks",
)
async def batch_add_tags(
    owner_id: str,
    request_data: BatchTagsRequest,
    engine: Engine,
    actor_id: ActorId,
) -> BatchResultResponse:
    result = await engine.add_tags_to_batch_tasks(
        owner_id, request_data.task_ids, request_data.tags, actor_id
    )
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/delete",
    response_model=BatchResultResponse,
    summary="Delete many tasks",
)
async def batch_delete(
    owner_id: str, request_data: BatchDeleteRequest, engine: Engine
) -> BatchResultResponse:
    result = await engine.delete_batch_tasks(owner_id, request_data.task_ids)
    return BatchResultResponse.from_result(result)


# =============================================================================
# Single task
# =============================================================================


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_ERROR_RESPONSES,
    summary="Get a task",
)
async def get_task(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> TaskResponse:
    try:
        task = await engine.get_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TaskResponse.from_task(task)


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_ERROR_RESPONSES,
    summary="Update task fields",
    description="Partial update. A status change is applied after the other fields.",
)
async def update_task(
    owner_id: str,
    task_id: str,
    request_data: UpdateTaskRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> TaskResponse:
    try:
        await engine.update_task(
            owner_id, task_id, request_data.to_changes(), actor_id=actor_id
        )
        task = await engine.get_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TaskResponse.from_task(task)


@router.patch(
    "/{task_id}/metadata",
    response_model=TaskResponse,
    responses=_ERROR_RESPONSES,
    summary="Merge task metadata",
)
async def update_task_metadata(
    owner_id: str,
    task_id: str,
    request_data: UpdateMetadataRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> TaskResponse:
    try:
        await engine.update_task_metadata(
            owner_id, task_id, request_data.to_updates(), actor_id=actor_id
        )
        task = await engine.get_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TaskResponse.from_task(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_ERROR_RESPONSES,
    summary="Delete a task",
)
async def delete_task(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> Response:
    try:
        await engine.delete_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{task_id}/status",
    response_model=TaskResponse,
    responses={
        **_ERROR_RESPONSES,
        409: {"model": TaskErrorResponse, "description": "Dependencies incomplete"},
    },
    summary="Change task status",
    description=(
        "Completing a task sets progress to 100%. With enforce_dependencies, "
        "moving to in-progress is refused while a dependency is incomplete."
    ),
)
async def update_task_status(
    owner_id: str,
    task_id: str,
    request_data: StatusUpdateRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> TaskResponse:
    try:
        await engine.update_task_status(
            owner_id,
            task_id,
            request_data.status.to_domain(),
            actor_id=actor_id,
            enforce_dependencies=request_data.enforce_dependencies,
        )
        task = await engine.get_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TaskResponse.from_task(task)


@router.put(
    "/{task_id}/progress",
    response_model=ProgressResponse,
    responses=_ERROR_RESPONSES,
    summary="Set completion percentage",
)
async def update_task_progress(
    owner_id: str,
    task_id: str,
    request_data: ProgressUpdateRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> ProgressResponse:
    try:
        stored = await engine.update_task_progress(
            owner_id, task_id, request_data.percentage, actor_id=actor_id
        )
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return ProgressResponse(task_id=task_id, completion_percentage=stored)


@router.get(
    "/{task_id}/dependencies/check",
    response_model=DependencyCheckResponse,
    responses=_ERROR_RESPONSES,
    summary="Check whether all dependencies are completed",
)
async def check_dependencies(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> DependencyCheckResponse:
    try:
        satisfied = await engine.check_dependencies(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return DependencyCheckResponse(task_id=task_id, dependencies_satisfied=satisfied)


@router.put(
    "/{task_id}/timer",
    response_model=TimerUpdateResponse,
    responses=_ERROR_RESPONSES,
    summary="Start or stop the task timer",
)
async def update_task_timer(
    owner_id: str,
    task_id: str,
    request_data: TimerUpdateRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> TimerUpdateResponse:
    try:
        result = await engine.update_task_timer(
            owner_id,
            task_id,
            request_data.is_running,
            elapsed_delta_ms=request_data.elapsed_delta_ms,
            actor_id=actor_id,
        )
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return TimerUpdateResponse.from_result(result)


@router.get(
    "/{task_id}/split",
    response_model=SplitCheckResponse,
    responses=_ERROR_RESPONSES,
    summary="Check whether the task overran its split threshold",
)
async def check_split_needed(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> SplitCheckResponse:
    try:
        needed = await engine.check_task_split_needed(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return SplitCheckResponse(task_id=task_id, split_needed=needed)


@router.post(
    "/{task_id}/split",
    response_model=SplitResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Split a task into two halves",
)
async def auto_split_task(
    owner_id: str,
    task_id: str,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> SplitResponse:
    try:
        result = await engine.auto_split_task(owner_id, task_id, actor_id=actor_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return SplitResponse.from_result(result)


@router.post(
    "/{task_id}/score",
    response_model=ScoreResponse,
    responses=_ERROR_RESPONSES,
    summary="Recompute the personalization score",
)
async def calculate_personalization_score(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> ScoreResponse:
    try:
        score = await engine.calculate_personalization_score(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return ScoreResponse(task_id=task_id, personalization_score=score)


@router.get(
    "/{task_id}/history",
    response_model=HistoryResponse,
    responses=_ERROR_RESPONSES,
    summary="Task activity history, newest first",
)
async def get_task_history(
    owner_id: str,
    task_id: str,
    request: Request,
    engine: Engine,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> HistoryResponse:
    try:
        activities = await engine.get_task_history(owner_id, task_id, limit)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return HistoryResponse(
        task_id=task_id,
        activities=[ActivityResponse.from_activity(a) for a in activities],
    )


@router.post(
    "/{task_id}/subtasks",
    response_model=BreakdownResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Break a task down into subtasks",
)
async def breakdown_task(
    owner_id: str,
    task_id: str,
    request_data: BreakdownRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> BreakdownResponse:
    try:
        subtask_ids = await engine.breakdown_task(
            owner_id,
            task_id,
            [s.to_task_input() for s in request_data.subtasks],
            actor_id=actor_id,
        )
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return BreakdownResponse(parent_task_id=task_id, subtask_ids=subtask_ids)


@router.get(
    "/{task_id}/analysis",
    response_model=AnalysisResponse,
    responses=_ERROR_RESPONSES,
    summary="Recommendations for a task",
)
async def analyze_task(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> AnalysisResponse:
    try:
        recommendations = await engine.analyze_task(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return AnalysisResponse(
        task_id=task_id,
        recommendations=[
            RecommendationResponse.from_recommendation(r) for r in recommendations
        ],
    )


@router.get(
    "/{task_id}/guidance",
    response_model=GuidanceResponse,
    responses=_ERROR_RESPONSES,
    summary="Guidance text for a task",
)
async def provide_task_guidance(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> GuidanceResponse:
    try:
        guidance = await engine.provide_task_guidance(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return GuidanceResponse(task_id=task_id, guidance=guidance)


# =============================================================================
# Comments
# =============================================================================


@router.get(
    "/{task_id}/comments",
    response_model=CommentListResponse,
    responses=_ERROR_RESPONSES,
    summary="List comments on a task",
)
async def list_comments(
    owner_id: str, task_id: str, request: Request, engine: Engine
) -> CommentListResponse:
    try:
        comments = await engine.comments.list_comments(owner_id, task_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return CommentListResponse(
        comments=[CommentResponse.from_comment(c) for c in comments]
    )


@router.post(
    "/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_ERROR_RESPONSES,
        401: {"model": TaskErrorResponse, "description": "X-User-ID missing"},
    },
    summary="Post a comment or reply",
)
async def add_comment(
    owner_id: str,
    task_id: str,
    request_data: CommentRequest,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> CommentResponse:
    if actor_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required to post comments",
        )
    try:
        if request_data.parent_comment_id:
            comment = await engine.comments.reply(
                owner_id,
                task_id,
                request_data.parent_comment_id,
                actor_id,
                request_data.content,
                request_data.attachments,
            )
        else:
            comment = await engine.comments.add_comment(
                owner_id,
                task_id,
                actor_id,
                request_data.content,
                request_data.attachments,
            )
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return CommentResponse.from_comment(comment)


@router.delete(
    "/{task_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        **_ERROR_RESPONSES,
        401: {"model": TaskErrorResponse, "description": "X-User-ID missing"},
        403: {"model": TaskErrorResponse, "description": "Not the author"},
    },
    summary="Delete a comment",
)
async def delete_comment(
    owner_id: str,
    task_id: str,
    comment_id: str,
    request: Request,
    engine: Engine,
    actor_id: ActorId,
) -> Response:
    if actor_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required to delete comments",
        )
    try:
        await engine.comments.delete_comment(owner_id, task_id, comment_id, actor_id)
    except TaskEngineError as e:
        raise _problem(e, request) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
