"""Webhook delivery — one JSON POST per destination."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import structlog

from src.core.config import WebhookConfig
from src.notifier.exceptions import ConfigurationError, TransportError
from src.notifier.types import (
    DeliveryOutcome,
    DeliveryStatus,
    Destination,
    NotificationMessage,
)

logger = structlog.get_logger(__name__)


def build_payload(message: NotificationMessage, username: str | None = None) -> dict[str, Any]:
    """Serialize *message* to the webhook JSON body.

    Optional keys are left out when unset. *username* replaces the
    message's own username when given.
    """
    embed: dict[str, Any] = {
        "title": message.title,
        "description": message.description,
    }
    if message.url:
        embed["url"] = message.url
    embed["color"] = int(message.color)
    if message.timestamp:
        embed["timestamp"] = message.timestamp
    if message.footer is not None:
        embed["footer"] = message.footer.model_dump(exclude_none=True)
    if message.thumbnail is not None:
        embed["thumbnail"] = message.thumbnail.model_dump()
    embed["fields"] = [f.model_dump() for f in message.fields]

    payload: dict[str, Any] = {}
    name = username or message.username
    if name:
        payload["username"] = name
    payload["embeds"] = [embed]
    return payload


class WebhookDeliveryClient:
    """Posts notification messages to webhook URLs.

    Never raises from ``deliver``: every failure becomes a DeliveryOutcome.
    No retries; each request is bounded by ``config.timeout_secs``.
    """

    def __init__(self, config: WebhookConfig | None = None) -> None:
        self._config = config or WebhookConfig()
        self._timeout = aiohttp.ClientTimeout(total=self._config.timeout_secs)
        self._session: aiohttp.ClientSession | None = None
        self._session_loop: asyncio.AbstractEventLoop | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        if self._session is not None and not self._session.closed and self._session_loop is loop:
            return self._session
        if self._session is not None and not self._session.closed:
            # Session belongs to another (usually already closed) event loop.
            self._session.detach()
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        self._session_loop = loop
        return self._session

    async def deliver(
        self, message: NotificationMessage, destination: Destination
    ) -> DeliveryOutcome:
        try:
            _check_destination(destination)
        except ConfigurationError as exc:
            logger.error(
                "webhook_url_not_set",
                recipient=destination.recipient,
                title=message.title,
            )
            return DeliveryOutcome(
                status=DeliveryStatus.CONFIGURATION_ERROR,
                recipient=destination.recipient,
                error=str(exc),
            )

        payload = build_payload(message, username=destination.display_name or None)

        try:
            status = await self._post(destination.url, payload)
        except TransportError as exc:
            logger.warning(
                "webhook_send_failed",
                recipient=destination.recipient,
                title=message.title,
                status=exc.status,
                error=str(exc),
            )
            return DeliveryOutcome(
                status=DeliveryStatus.TRANSPORT_ERROR,
                recipient=destination.recipient,
                error=str(exc),
                http_status=exc.status,
            )
        except Exception as exc:
            logger.exception(
                "webhook_send_error",
                recipient=destination.recipient,
                title=message.title,
            )
            return DeliveryOutcome(
                status=DeliveryStatus.TRANSPORT_ERROR,
                recipient=destination.recipient,
                error=f"{type(exc).__name__}: {exc}",
            )

        logger.debug(
            "webhook_sent",
            recipient=destination.recipient,
            title=message.title,
            status=status,
        )
        return DeliveryOutcome(
            status=DeliveryStatus.DELIVERED,
            recipient=destination.recipient,
            http_status=status,
        )

    async def _post(self, url: str, payload: dict[str, Any]) -> int:
        try:
            session = self._get_session()
            async with session.post(url, json=payload, timeout=self._timeout) as resp:
                if 200 <= resp.status < 300:
                    return resp.status
                body = await resp.text()
                raise TransportError(
                    f"webhook responded with HTTP {resp.status}: {body[:200]}",
                    status=resp.status,
                )
        except TransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"webhook timed out after {self._config.timeout_secs}s"
            ) from exc
        except (aiohttp.ClientError, OSError, ValueError) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

    async def close(self) -> None:
        if self._session and not self._session.closed:
            if self._session_loop is asyncio.get_running_loop():
                await self._session.close()
            else:
                self._session.detach()
        self._session = None
        self._session_loop = None


def _check_destination(destination: Destination) -> None:
    if not destination.url.strip():
        raise ConfigurationError(
            f"webhook URL for recipient {destination.recipient!r} has not been set"
        )
