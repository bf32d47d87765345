import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.notification import Notification
from .base import NotificationChannel
from .events import NotificationMessage
from .exceptions import NotificationDeliveryException

logger = logging.getLogger(__name__)


def inbox_sessions(db: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Sessions on the same engine as ``db`` but outside its transaction"""
    return async_sessionmaker(db.bind, class_=AsyncSession, expire_on_commit=False)


class DatabaseChannel(NotificationChannel):
    """
    Persists notifications to the recipients' inboxes.
    Each batch is written through its own session, so a failed batch never
    rolls back or expires objects held by the request's session.
    """

    name = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self._pending: List[Notification] = []

    async def deliver(self, message: NotificationMessage) -> None:
        self._pending.append(
            Notification(
                recipient_id=message.recipient_id,
                kind=message.kind.value,
                data=message.data,
            )
        )

    async def flush(self) -> None:
        """
        Commit buffered inbox rows in one transaction.
        :raises NotificationDeliveryException: If the commit fails; the batch is dropped
        """
        if not self._pending:
            return

        batch, self._pending = self._pending, []
        async with self.session_factory() as session:
            session.add_all(batch)
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise NotificationDeliveryException(self.name, str(e)) from e

        logger.debug(f"Stored {len(batch)} notifications")
