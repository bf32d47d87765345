import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.redis_client import redis_client
from .base import NotificationChannel
from .broadcast import RedisBroadcastChannel
from .database import DatabaseChannel, inbox_sessions
from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


def create_channels(db: AsyncSession) -> List[NotificationChannel]:
    """
    Build delivery channels from configuration.
    The inbox channel is always present; real-time push is optional.
    """
    channels: List[NotificationChannel] = [DatabaseChannel(inbox_sessions(db))]

    if settings.NOTIFICATIONS_BROADCAST_ENABLED:
        channels.append(RedisBroadcastChannel(redis_client))

    return channels


def create_dispatcher(db: AsyncSession) -> NotificationDispatcher:
    """Create a dispatcher bound to the request's database session"""
    return NotificationDispatcher(create_channels(db))
