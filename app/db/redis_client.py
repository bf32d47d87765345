import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from app.core.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Shared Redis connection used to push notifications to connected clients.
    Outside production an unreachable server only disables real-time push.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self._redis: Optional[Redis] = None

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """
        Open the connection and verify it with a ping.
        :raises redis.ConnectionError: In production, if the server is unreachable
        """
        client = redis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            health_check_interval=30,
        )
        try:
            await client.ping()
        except redis.ConnectionError as e:
            await client.aclose()
            if settings.is_production:
                raise
            logger.warning(f"Redis unavailable, real-time push disabled: {e}")
            return

        self._redis = client
        logger.info(f"Connected to Redis at {self.url}")

    async def disconnect(self) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.aclose()
            logger.info("Disconnected from Redis")
        except redis.RedisError as e:
            logger.error(f"Error disconnecting from Redis: {e}")
        finally:
            self._redis = None

    async def ping(self) -> bool:
        """Check that the connection is still alive"""
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except redis.RedisError:
            return False

    async def publish(self, channel: str, payload: Any) -> bool:
        """
        Publish on a pub/sub channel.
        :param channel: Channel name.
        :param payload: String, or anything JSON-serialisable.
        :return: True if Redis accepted the message, False otherwise.
        """
        if self._redis is None:
            logger.error("Redis client is not connected")
            return False

        message = payload if isinstance(payload, str) else json.dumps(payload)
        try:
            await self._redis.publish(channel, message)
            return True
        except redis.RedisError as e:
            logger.error(f"Error publishing to channel '{channel}': {e}")
            return False


redis_client = RedisClient()
