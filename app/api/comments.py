from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.exceptions import raise_for_result
from app.db.client import get_db
from app.schemas.auth import AuthUser
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.responses import ERROR_RESPONSES, MessageResponse, DataResponse
from app.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["Comments"], responses=ERROR_RESPONSES)


@router.get("/", response_model=DataResponse[List[CommentResponse]])
async def list_comments(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    task_id: UUID = Query(..., description="Task whose comments to list"),
) -> DataResponse[List[CommentResponse]]:
    """
    List comments on a task, newest first.
    """
    result = await CommentService(db).list_comments(current_user, task_id)
    raise_for_result(result)

    return DataResponse(
        message=result.message,
        data=[CommentResponse.model_validate(comment) for comment in result.data],
    )


@router.post("/", response_model=DataResponse[CommentResponse], status_code=201)
async def create_comment(
    comment_data: CommentCreate,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[CommentResponse]:
    """
    Comment on a task.
    """
    result = await CommentService(db).create_comment(current_user, comment_data)
    raise_for_result(result)

    return DataResponse(
        message=result.message, data=CommentResponse.model_validate(result.data)
    )


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Delete a comment. Author or project owner only.
    """
    result = await CommentService(db).delete_comment(current_user, comment_id)
    raise_for_result(result)

    return MessageResponse(result.message)
