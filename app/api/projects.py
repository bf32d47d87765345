import logging
from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.exceptions import raise_for_result
from app.db.client import get_db
from app.schemas.auth import AuthUser
from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectListItem,
)
from app.schemas.responses import ERROR_RESPONSES, MessageResponse, DataResponse
from app.services.project_service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"], responses=ERROR_RESPONSES)


@router.get("/", response_model=DataResponse[List[ProjectListItem]])
async def list_projects(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[List[ProjectListItem]]:
    """
    List projects the current user belongs to, with their role and task count.
    """
    result = await ProjectService(db).list_projects(current_user)
    raise_for_result(result)

    return DataResponse(
        message=result.message,
        data=[
            ProjectListItem(
                id=project.id,
                name=project.name,
                description=project.description,
                created_by=project.created_by,
                role=role,
                tasks_count=tasks_count,
                created_at=project.created_at,
            )
            for project, role, tasks_count in result.data
        ],
    )


@router.post("/", response_model=DataResponse[ProjectResponse], status_code=201)
async def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[ProjectResponse]:
    """
    Create a project. The current user becomes its owner.
    """
    result = await ProjectService(db).create_project(current_user, project_data)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=ProjectResponse.model_validate(result.data)
    )


@router.get("/{project_id}", response_model=DataResponse[ProjectResponse])
async def get_project(
    project_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[ProjectResponse]:
    """
    Get project details with members.
    """
    result = await ProjectService(db).get_project(current_user, project_id)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=ProjectResponse.model_validate(result.data)
    )


@router.put("/{project_id}", response_model=DataResponse[ProjectResponse])
async def update_project(
    project_id: UUID,
    update_data: ProjectUpdate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[ProjectResponse]:
    """
    Update project details and membership. Owner or manager only.
    """
    result = await ProjectService(db).update_project(
        current_user, project_id, update_data
    )
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=ProjectResponse.model_validate(result.data)
    )


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Delete a project. Owner or system admin only.
    """
    result = await ProjectService(db).delete_project(current_user, project_id)
    raise_for_result(result)

    return MessageResponse(result.message)
