"""Convenience factory for wiring the notifier stack."""

from __future__ import annotations

from src.core.config import Settings
from src.notifier.client import WebhookDeliveryClient
from src.notifier.dispatcher import NotificationDispatcher
from src.notifier.ports import NotificatorRegistry, ProjectRegistry, UserConfigResolver


def create_notifier(
    settings: Settings,
    users: UserConfigResolver,
    projects: ProjectRegistry,
    registry: NotificatorRegistry | None = None,
) -> NotificationDispatcher:
    """Build a dispatcher and its delivery client from settings.

    When *registry* is given the notifier registers its user properties
    with it.
    """
    dispatcher = NotificationDispatcher(
        client=WebhookDeliveryClient(settings.webhook),
        users=users,
        projects=projects,
        config=settings.notificator,
    )
    if registry is not None:
        dispatcher.register(registry)
    return dispatcher
