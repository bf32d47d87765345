from abc import ABC, abstractmethod

from .events import NotificationMessage


class NotificationChannel(ABC):
    """Abstract base class for notification delivery channels"""

    name: str = "channel"

    @abstractmethod
    async def deliver(self, message: NotificationMessage) -> None:
        """
        Deliver a single notification to its recipient.
        :param message: Planned notification with recipient and payload
        :raises NotificationDeliveryException: If delivery fails
        """
        pass

    async def flush(self) -> None:
        """
        Finish a batch of deliveries. Channels that buffer writes override this.
        """
        return None
