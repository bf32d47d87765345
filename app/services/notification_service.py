import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import utcnow
from app.models.notification import Notification
from app.schemas.auth import AuthUser
from app.services.results import ServiceResult

logger = logging.getLogger(__name__)


class NotificationService:
    """Recipient inbox operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notifications(
        self, recipient: AuthUser, limit: int = 50
    ) -> ServiceResult[Tuple[List[Notification], int]]:
        """
        Get the recipient's inbox.
        :param recipient: Inbox owner.
        :param limit: Maximum number of entries returned.
        :return: Result carrying (notifications newest first, unread count).
        """
        stmt = (
            select(Notification)
            .where(Notification.recipient_id == recipient.id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        notifications = list(await self.db.scalars(stmt))

        unread_stmt = select(func.count(Notification.id)).where(
            Notification.recipient_id == recipient.id,
            Notification.read_at.is_(None),
        )
        unread_count = await self.db.scalar(unread_stmt) or 0

        return ServiceResult.success(
            (notifications, unread_count), "Notifications retrieved successfully"
        )

    async def mark_read(
        self, recipient: AuthUser, notification_id: UUID
    ) -> ServiceResult[Notification]:
        """
        Mark one notification as read.
        Someone else's notification is reported as not found.
        """
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient.id,
        )
        notification = await self.db.scalar(stmt)
        if not notification:
            return ServiceResult.not_found("Notification", notification_id)

        notification.mark_as_read()
        await self.db.commit()

        return ServiceResult.success(notification, "Notification marked as read")

    async def mark_all_read(self, recipient: AuthUser) -> ServiceResult[int]:
        """
        Mark every unread notification of the recipient as read.
        :return: Result carrying the number of notifications updated.
        """
        stmt = (
            update(Notification)
            .where(
                Notification.recipient_id == recipient.id,
                Notification.read_at.is_(None),
            )
            .values(read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        logger.info(f"Marked {result.rowcount} notifications read for {recipient.id}")
        return ServiceResult.success(result.rowcount, "All notifications marked as read")
