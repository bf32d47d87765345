import logging
from typing import Iterable, List, Sequence

from .base import NotificationChannel
from .events import NotificationMessage

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Hands planned notifications to every configured delivery channel.
    Delivery is best effort: failures are logged per channel and never
    propagate to the caller.
    """

    def __init__(self, channels: Sequence[NotificationChannel]):
        self.channels = list(channels)

    async def dispatch(self, messages: Iterable[NotificationMessage]) -> int:
        """
        Deliver notifications.
        :param messages: Planned notifications.
        :return: Number of (message, channel) deliveries that succeeded.
        """
        batch: List[NotificationMessage] = list(messages)
        if not batch:
            return 0

        delivered = 0
        for channel in self.channels:
            channel_delivered = 0
            for message in batch:
                try:
                    await channel.deliver(message)
                    channel_delivered += 1
                except Exception as e:
                    logger.error(
                        f"Failed to deliver {message.kind.value} to "
                        f"{message.recipient_id} via {channel.name}: {e}"
                    )

            try:
                await channel.flush()
            except Exception as e:
                logger.error(f"Failed to flush {channel.name} channel: {e}")
                continue

            delivered += channel_delivered

        logger.info(
            f"Dispatched {len(batch)} notifications "
            f"over {len(self.channels)} channels ({delivered} deliveries)"
        )
        return delivered
