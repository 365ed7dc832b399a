"""Task API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from api.v1.dependencies import get_task_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.task import TaskCreate, TaskResponse, TaskToggle, TaskUpdate
from core.config import settings
from core.rate_limit import limiter
from domain.entities.task import PAGING_MAX
from domain.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

TOTAL_COUNT_HEADER = "X-Total-Count"


@router.get(
    "",
    response_model=list[TaskResponse],
    summary="List tasks",
    responses={
        200: {"description": "One page of tasks; total match count in X-Total-Count"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_tasks(
    request: Request,
    response: Response,
    service: TaskService = Depends(get_task_service),
    status_filter: str = Query(
        "all", alias="status", description="all | active | completed"
    ),
    sort: str = Query("dueDate", description="dueDate | createdAt"),
    order: str = Query("asc", description="asc | desc"),
    page: int = Query(1, ge=1, le=PAGING_MAX),
    page_size: int = Query(
        settings.default_page_size, ge=1, le=PAGING_MAX, alias="pageSize"
    ),
) -> list[TaskResponse]:
    """
    Get one page of tasks.

    Incomplete tasks always come before completed ones. Unknown `status`
    values list every task; an unknown `sort` falls back to due date ascending.
    """
    result = await service.list_tasks(
        status=status_filter,
        sort=sort,
        order=order,
        page=page,
        page_size=page_size,
    )
    response.headers[TOTAL_COUNT_HEADER] = str(result.total)
    return [TaskResponse.from_entity(task) for task in result.items]


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task",
    responses={
        200: {"description": "Task details"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_task(
    request: Request,
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Get a specific task by ID."""
    task = await service.get_by_id(task_id)
    return TaskResponse.from_entity(task)


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ErrorResponse, "description": "Validation error"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_task(
    request: Request,
    response: Response,
    body: TaskCreate,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Create a new task.

    The title must be longer than 10 characters after trimming, notes are
    limited to 1000 characters, and `dueDate` must be ISO 8601.
    """
    task = await service.create(
        title=body.title,
        notes=body.notes,
        due_date=body.due_date,
        done=body.done,
    )
    response.headers["Location"] = str(request.url_for("get_task", task_id=str(task.id)))
    return TaskResponse.from_entity(task)


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
    responses={
        200: {"description": "Task updated successfully"},
        400: {"model": ErrorResponse, "description": "Validation error"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_task(
    request: Request,
    task_id: UUID,
    body: TaskUpdate,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Update an existing task. All fields are optional (partial update).

    Send `dueDate: ""` to clear the due date.
    """
    task = await service.update(
        task_id,
        title=body.title,
        notes=body.notes,
        due_date=body.due_date,
        done=body.done,
    )
    return TaskResponse.from_entity(task)


@router.post(
    "/{task_id}/toggle",
    response_model=TaskResponse,
    summary="Set a task's done flag",
    responses={
        200: {"description": "Task updated successfully"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def toggle_task(
    request: Request,
    task_id: UUID,
    body: TaskToggle,
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Set `done` to the given value. `updatedAt` advances even if unchanged."""
    task = await service.toggle(task_id, body.done)
    return TaskResponse.from_entity(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
    responses={
        204: {"description": "Task deleted successfully"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_task(
    request: Request,
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task."""
    await service.delete(task_id)
    return None
