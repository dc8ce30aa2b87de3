"""Factory method demo: notification senders chosen by a string key."""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional


class UnknownNotificationTypeError(ValueError):
    """Raised when the factory is asked for an unsupported notification type."""

    def __init__(self, notification_type: str, available: List[str]):
        super().__init__(
            f"Unknown notification type '{notification_type}'. "
            f"Available types: {available}"
        )
        self.notification_type = notification_type
        self.available = available


class Notification(ABC):
    """A message delivered to a user."""

    channel: str = ""

    def __init__(self, writer: Optional[Callable[[str], None]] = None):
        self._writer = writer or print

    @property
    @abstractmethod
    def message(self) -> str:
        """Text announcing the delivery."""

    def notify_user(self) -> str:
        self._writer(self.message)
        return self.message


class EmailNotification(Notification):
    channel = "EMAIL"

    @property
    def message(self) -> str:
        return "Sending an Email notification"


class SMSNotification(Notification):
    channel = "SMS"

    @property
    def message(self) -> str:
        return "Sending an SMS notification"


class WhatsAppNotification(Notification):
    channel = "WHATS APP"

    @property
    def message(self) -> str:
        return "Sending a WhatsApp notification"


class NotificationFactory:
    """Creates notifications from a case-insensitive channel name."""

    _creators: Dict[str, Callable[..., Notification]] = {
        EmailNotification.channel: EmailNotification,
        SMSNotification.channel: SMSNotification,
        WhatsAppNotification.channel: WhatsAppNotification,
    }

    def __init__(self, writer: Optional[Callable[[str], None]] = None):
        self._writer = writer

    @classmethod
    def available_types(cls) -> List[str]:
        return list(cls._creators.keys())

    def create_notification(self, notification_type: str) -> Notification:
        """
        Create a notification for the given channel.

        Raises:
            UnknownNotificationTypeError: If the channel is not supported
        """
        creator = self._creators.get(notification_type.strip().upper())
        if creator is None:
            raise UnknownNotificationTypeError(notification_type, self.available_types())
        return creator(self._writer)
