class NotificationDeliveryException(Exception):
    """Raised by a channel when a notification could not be delivered"""

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"[{channel}] {message}")
