"""Central notification dispatcher — one message per event, one POST per recipient."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from src.core.config import NotificatorConfig
from src.core.types import CIEvent
from src.notifier.client import WebhookDeliveryClient
from src.notifier.formatters import format_event
from src.notifier.ports import (
    WEBHOOK_URL_KEY,
    WEBHOOK_USERNAME_KEY,
    NotificatorRegistry,
    ProjectRegistry,
    UserConfigResolver,
    UserPropertyInfo,
)
from src.notifier.types import DeliveryOutcome, DeliveryStatus, NotificationMessage

# Dedicated structured logger for every message built.
notification_logger = structlog.get_logger("notification_log")

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Routes CI events to each recipient's webhook.

    - Every event with a message is logged via *notification_logger*.
    - Mute/unmute events without a project are dropped before delivery.
    - Recipients are delivered to one after another; a recipient with no
      webhook URL, or whose delivery fails, does not stop the others.
    - Nothing raised while building or delivering escapes ``handle``.
    """

    def __init__(
        self,
        client: WebhookDeliveryClient,
        users: UserConfigResolver,
        projects: ProjectRegistry,
        config: NotificatorConfig | None = None,
    ) -> None:
        self._client = client
        self._users = users
        self._projects = projects
        self._config = config or NotificatorConfig()

    @property
    def notificator_type(self) -> str:
        return self._config.notificator_type

    @property
    def display_name(self) -> str:
        return self._config.display_name

    def user_properties(self) -> list[UserPropertyInfo]:
        """The per-user settings this notifier reads."""
        return [
            UserPropertyInfo(key=WEBHOOK_URL_KEY, label=self._config.webhook_url_label),
            UserPropertyInfo(key=WEBHOOK_USERNAME_KEY, label=self._config.username_label),
        ]

    def register(self, registry: NotificatorRegistry) -> None:
        registry.register(self.notificator_type, self.display_name, self.user_properties())

    # ── Entry point ─────────────────────────────────────────────

    async def handle(
        self, event: CIEvent, recipients: Iterable[str]
    ) -> list[DeliveryOutcome]:
        """Notify *recipients* about *event*; returns one outcome per recipient."""
        try:
            msg = format_event(event, self._projects)
        except Exception:
            logger.exception("notification_build_error", event_type=event.event_type.value)
            return []

        if msg is None:
            logger.info(
                "notification_skipped",
                event_type=event.event_type.value,
                reason="no_project",
            )
            return []

        recipients = list(recipients)
        self._log_notification(msg, len(recipients))

        outcomes: list[DeliveryOutcome] = []
        for recipient in recipients:
            outcomes.append(await self._deliver_to(recipient, msg))
        return outcomes

    # ── Internal routing ────────────────────────────────────────

    async def _deliver_to(self, recipient: str, msg: NotificationMessage) -> DeliveryOutcome:
        try:
            destination = self._users.resolve(recipient)
        except Exception:
            logger.exception("recipient_resolve_error", recipient=recipient)
            return DeliveryOutcome(
                status=DeliveryStatus.CONFIGURATION_ERROR,
                recipient=recipient,
                error="failed to read recipient configuration",
            )

        if destination is None:
            logger.error("webhook_url_not_set", recipient=recipient, title=msg.title)
            return DeliveryOutcome(
                status=DeliveryStatus.CONFIGURATION_ERROR,
                recipient=recipient,
                error=f"no webhook configured for recipient {recipient!r}",
            )

        if not destination.recipient:
            destination = destination.model_copy(update={"recipient": recipient})

        try:
            return await self._client.deliver(msg, destination)
        except Exception as exc:
            logger.exception("delivery_error", recipient=recipient, title=msg.title)
            return DeliveryOutcome(
                status=DeliveryStatus.TRANSPORT_ERROR,
                recipient=recipient,
                error=str(exc),
            )

    def _log_notification(self, msg: NotificationMessage, recipient_count: int) -> None:
        notification_logger.info(
            "notification",
            event_type=msg.source_event_type,
            title=msg.title,
            description=msg.description,
            color=msg.color.name,
            fields={f.name: f.value for f in msg.fields},
            recipients=recipient_count,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        try:
            await self._client.close()
        except Exception:
            logger.exception("client_close_error")
