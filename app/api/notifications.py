from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.exceptions import raise_for_result
from app.db.client import get_db
from app.schemas.auth import AuthUser
from app.schemas.notification import NotificationInbox, NotificationResponse
from app.schemas.responses import ERROR_RESPONSES, MessageResponse, DataResponse
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"], responses=ERROR_RESPONSES)


@router.get("/", response_model=DataResponse[NotificationInbox])
async def get_notifications(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Optional[int] = Query(None, ge=1, le=200, description="Maximum entries"),
) -> DataResponse[NotificationInbox]:
    """
    Get the current user's inbox with the unread count.
    """
    result = await NotificationService(db).list_notifications(
        current_user, limit or settings.NOTIFICATION_INBOX_LIMIT
    )
    raise_for_result(result)

    notifications, unread_count = result.data
    return DataResponse(
        message=result.message,
        data=NotificationInbox(
            notifications=[
                NotificationResponse.model_validate(notification)
                for notification in notifications
            ],
            unread_count=unread_count,
        ),
    )


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_notifications_read(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """
    Mark every notification as read.
    """
    result = await NotificationService(db).mark_all_read(current_user)
    raise_for_result(result)

    return MessageResponse(result.message)


@router.patch("/{notification_id}/read", response_model=DataResponse[NotificationResponse])
async def mark_notification_read(
    notification_id: UUID,
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DataResponse[NotificationResponse]:
    """
    Mark a single notification as read.
    """
    result = await NotificationService(db).mark_read(current_user, notification_id)
    raise_for_result(result)

    return DataResponse(
        message=result.message,
        data=NotificationResponse.model_validate(result.data),
    )
