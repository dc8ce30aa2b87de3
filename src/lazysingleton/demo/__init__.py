"""Creational pattern demos built on the singleton registry."""

from .gui import GUIFactory, MacFactory, WinFactory, get_gui_factory
from .logging_service import AuditTrail, LoggingService
from .notifications import Notification, NotificationFactory, UnknownNotificationTypeError

__all__ = [
    "LoggingService",
    "AuditTrail",
    "Notification",
    "NotificationFactory",
    "UnknownNotificationTypeError",
    "GUIFactory",
    "WinFactory",
    "MacFactory",
    "get_gui_factory",
]
