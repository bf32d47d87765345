import logging

from app.core.config import settings
from app.db.redis_client import RedisClient
from .base import NotificationChannel
from .events import NotificationMessage
from .exceptions import NotificationDeliveryException

logger = logging.getLogger(__name__)


class RedisBroadcastChannel(NotificationChannel):
    """Pushes notifications to per-user Redis pub/sub channels"""

    name = "broadcast"

    def __init__(self, redis: RedisClient, prefix: str = ""):
        self.redis = redis
        self.prefix = prefix or settings.NOTIFICATION_CHANNEL_PREFIX

    def channel_for(self, message: NotificationMessage) -> str:
        return f"{self.prefix}:{message.recipient_id}"

    async def deliver(self, message: NotificationMessage) -> None:
        if not self.redis.is_connected:
            logger.debug("Redis not connected, skipping real-time push")
            return

        published = await self.redis.publish(self.channel_for(message), message.to_dict())
        if not published:
            raise NotificationDeliveryException(
                self.name, f"Failed to publish to {self.channel_for(message)}"
            )
