import logging
from typing import Annotated, Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.exceptions import raise_for_result, validate_body
from app.db.client import get_db
from app.models.task import Task, TaskStatus, TaskPriority
from app.schemas.auth import AuthUser
from app.schemas.responses import ERROR_RESPONSES, MessageResponse, DataResponse
from app.schemas.task import (
    TaskCreate,
    TaskCreateTarget,
    TaskUpdate,
    TaskStatusUpdate,
    TaskPriorityUpdate,
    TaskAssigneesUpdate,
    TaskFilters,
    TaskResponse,
    TaskListItem,
)
from app.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"], responses=ERROR_RESPONSES)


def _task_list_item(task: Task, comments_count: int) -> TaskListItem:
    return TaskListItem(
        **TaskResponse.model_validate(task).model_dump(),
        project_name=task.project.name,
        comments_count=comments_count,
    )


@router.get("/", response_model=DataResponse[List[TaskListItem]])
async def list_tasks(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: Optional[UUID] = Query(None, description="Filter by project"),
    task_status: Optional[TaskStatus] = Query(
        None, alias="status", description="Filter by status"
    ),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
) -> DataResponse[List[TaskListItem]]:
    """
    List tasks across the current user's projects.
    """
    filters = TaskFilters(project_id=project_id, status=task_status, priority=priority)
    result = await TaskService(db).list_tasks(current_user, filters)
    raise_for_result(result)

    return DataResponse(
        message=result.message,
        data=[_task_list_item(task, count) for task, count in result.data],
    )


@router.post("/", response_model=DataResponse[TaskResponse], status_code=201)
async def create_task(
    payload: Annotated[Dict[str, Any], Body(description="Task fields, see TaskCreate")],
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Create a task in a project. Owner or manager only.
    The role is checked before the rest of the body is validated, so a
    member is refused whatever they send.
    """
    service = TaskService(db)

    target = validate_body(TaskCreateTarget, payload)
    raise_for_result(
        await service.authorize_task_creation(current_user, target.project_id)
    )

    task_data = validate_body(TaskCreate, payload)
    result = await service.create_task(current_user, task_data)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.get("/{task_id}", response_model=DataResponse[TaskResponse])
async def get_task(
    task_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Get task details.
    """
    result = await TaskService(db).get_task(current_user, task_id)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.put("/{task_id}", response_model=DataResponse[TaskResponse])
async def update_task(
    task_id: UUID,
    update_data: TaskUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Update a task. Assigned members may change status, priority and due date.
    """
    result = await TaskService(db).update_task(current_user, task_id, update_data)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.patch("/{task_id}/status", response_model=DataResponse[TaskResponse])
async def update_task_status(
    task_id: UUID,
    status_data: TaskStatusUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Change task status.
    """
    result = await TaskService(db).update_status(
        current_user, task_id, status_data.status
    )
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.patch("/{task_id}/priority", response_model=DataResponse[TaskResponse])
async def update_task_priority(
    task_id: UUID,
    priority_data: TaskPriorityUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Change task priority.
    """
    result = await TaskService(db).update_priority(
        current_user, task_id, priority_data.priority
    )
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.patch("/{task_id}/assignees", response_model=DataResponse[TaskResponse])
async def replace_task_assignees(
    task_id: UUID,
    assignees_data: TaskAssigneesUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[TaskResponse]:
    """
    Replace the task's assignee set. Owner or manager only.
    """
    result = await TaskService(db).replace_assignees(
        current_user, task_id, assignees_data.assigned_users
    )
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=TaskResponse.model_validate(result.data)
    )


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Delete a task. Project owner only.
    """
    result = await TaskService(db).delete_task(current_user, task_id)
    raise_for_result(result)

    return MessageResponse(result.message)
