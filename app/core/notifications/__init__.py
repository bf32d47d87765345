from .base import NotificationChannel
from .broadcast import RedisBroadcastChannel
from .database import DatabaseChannel, inbox_sessions
from .dispatcher import NotificationDispatcher
from .events import NotificationKind, NotificationMessage
from .exceptions import NotificationDeliveryException
from .factory import create_channels, create_dispatcher

__all__ = [
    "NotificationChannel",
    "RedisBroadcastChannel",
    "DatabaseChannel",
    "inbox_sessions",
    "NotificationDispatcher",
    "NotificationKind",
    "NotificationMessage",
    "NotificationDeliveryException",
    "create_channels",
    "create_dispatcher",
]
