"""CI event → chat webhook notification subsystem."""

from src.notifier.client import WebhookDeliveryClient, build_payload
from src.notifier.dispatcher import NotificationDispatcher
from src.notifier.exceptions import ConfigurationError, NotifierError, TransportError
from src.notifier.factory import create_notifier
from src.notifier.formatters import color_for, format_event
from src.notifier.payload import NO_DATA, build_context_fields
from src.notifier.ports import (
    InMemoryNotificatorRegistry,
    InMemoryProjectRegistry,
    NotificatorRegistry,
    ProjectRegistry,
    UserConfigResolver,
    UserPropertyInfo,
    UserPropertyStore,
)
from src.notifier.types import (
    DeliveryOutcome,
    DeliveryStatus,
    Destination,
    EmbedColor,
    EmbedField,
    NotificationMessage,
)

__all__ = [
    "NO_DATA",
    "ConfigurationError",
    "DeliveryOutcome",
    "DeliveryStatus",
    "Destination",
    "EmbedColor",
    "EmbedField",
    "InMemoryNotificatorRegistry",
    "InMemoryProjectRegistry",
    "NotificationDispatcher",
    "NotificationMessage",
    "NotificatorRegistry",
    "NotifierError",
    "ProjectRegistry",
    "TransportError",
    "UserConfigResolver",
    "UserPropertyInfo",
    "UserPropertyStore",
    "WebhookDeliveryClient",
    "build_context_fields",
    "build_payload",
    "color_for",
    "create_notifier",
    "format_event",
]
