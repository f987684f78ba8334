"""Tests for WebhookDeliveryClient — payload shape, HTTP mocking, error outcomes."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from src.core.config import WebhookConfig
from src.notifier.client import WebhookDeliveryClient, build_payload
from src.notifier.types import (
    DeliveryStatus,
    Destination,
    EmbedColor,
    EmbedField,
    EmbedFooter,
    EmbedThumbnail,
    NotificationMessage,
)


# ── Helpers ─────────────────────────────────────────────────────


def _msg(**kw: object) -> NotificationMessage:
    defaults: dict[str, object] = {
        "title": "Build started",
        "description": "The build with the ID 42 has started.",
        "color": EmbedColor.BLUE,
        "fields": [
            EmbedField(name="Project", value="Foo", inline=True),
            EmbedField(name="Build", value="Compile", inline=True),
            EmbedField(name="Branch", value="Default", inline=True),
        ],
    }
    defaults.update(kw)
    return NotificationMessage(**defaults)  # type: ignore[arg-type]


def _dest(**kw: object) -> Destination:
    defaults: dict[str, object] = {
        "url": "https://discord.com/api/webhooks/fake",
        "recipient": "alice",
    }
    defaults.update(kw)
    return Destination(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 204, text: str = "") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _client_with(post: MagicMock) -> WebhookDeliveryClient:
    client = WebhookDeliveryClient(WebhookConfig(timeout_secs=1.5))
    mock_session = MagicMock()
    mock_session.post = post
    mock_session.closed = False
    client._session = mock_session
    client._session_loop = asyncio.get_running_loop()
    return client


class _NoContentHandler(BaseHTTPRequestHandler):
    def do_POST(self) -> None:  # noqa: N802
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self.send_response(204)
        self.end_headers()

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        pass


@pytest.fixture
def webhook_url() -> Iterator[str]:
    """A local webhook endpoint answering every POST with 204."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _NoContentHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/webhook"
    finally:
        server.shutdown()
        server.server_close()


# ── Payload ─────────────────────────────────────────────────────


class TestBuildPayload:
    def test_minimal_shape(self) -> None:
        payload = build_payload(_msg())
        assert "username" not in payload
        assert len(payload["embeds"]) == 1
        embed = payload["embeds"][0]
        assert embed["title"] == "Build started"
        assert embed["description"] == "The build with the ID 42 has started."
        assert embed["color"] == 0x3498DB
        assert isinstance(embed["color"], int)
        assert "url" not in embed
        assert "timestamp" not in embed
        assert "footer" not in embed
        assert "thumbnail" not in embed

    def test_field_order_preserved(self) -> None:
        embed = build_payload(_msg())["embeds"][0]
        assert embed["fields"] == [
            {"name": "Project", "value": "Foo", "inline": True},
            {"name": "Build", "value": "Compile", "inline": True},
            {"name": "Branch", "value": "Default", "inline": True},
        ]

    def test_optional_parts(self) -> None:
        msg = _msg(
            url="https://ci.example.com/build/42",
            timestamp="2024-01-01T00:00:00Z",
            footer=EmbedFooter(text="CI"),
            thumbnail=EmbedThumbnail(url="https://ci.example.com/icon.png"),
        )
        embed = build_payload(msg)["embeds"][0]
        assert embed["url"] == "https://ci.example.com/build/42"
        assert embed["timestamp"] == "2024-01-01T00:00:00Z"
        assert embed["footer"] == {"text": "CI"}
        assert embed["thumbnail"] == {"url": "https://ci.example.com/icon.png"}

    def test_username_override(self) -> None:
        payload = build_payload(_msg(username="Original"), username="CI Bot")
        assert payload["username"] == "CI Bot"

    def test_message_username_kept_without_override(self) -> None:
        payload = build_payload(_msg(username="Original"))
        assert payload["username"] == "Original"


# ── Delivery ────────────────────────────────────────────────────


class TestDeliver:
    async def test_success(self) -> None:
        post = MagicMock(return_value=_mock_response(204))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.ok
        assert outcome.status == DeliveryStatus.DELIVERED
        assert outcome.recipient == "alice"
        assert outcome.http_status == 204
        post.assert_called_once()
        assert post.call_args[0][0] == "https://discord.com/api/webhooks/fake"
        assert post.call_args[1]["json"]["embeds"][0]["title"] == "Build started"

    async def test_request_timeout_bounded(self) -> None:
        post = MagicMock(return_value=_mock_response(200))
        client = _client_with(post)

        await client.deliver(_msg(), _dest())
        timeout = post.call_args[1]["timeout"]
        assert isinstance(timeout, aiohttp.ClientTimeout)
        assert timeout.total == 1.5

    async def test_empty_url_makes_no_request(self) -> None:
        post = MagicMock(return_value=_mock_response(204))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest(url=""))
        assert outcome.status == DeliveryStatus.CONFIGURATION_ERROR
        assert outcome.error
        post.assert_not_called()

    async def test_blank_url_makes_no_request(self) -> None:
        post = MagicMock(return_value=_mock_response(204))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest(url="   "))
        assert outcome.status == DeliveryStatus.CONFIGURATION_ERROR
        post.assert_not_called()

    async def test_http_error_status(self) -> None:
        post = MagicMock(return_value=_mock_response(404, "Unknown Webhook"))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR
        assert outcome.http_status == 404
        assert "Unknown Webhook" in (outcome.error or "")

    async def test_connection_error(self) -> None:
        post = MagicMock(side_effect=ConnectionError("refused"))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR
        assert "refused" in (outcome.error or "")

    async def test_client_error(self) -> None:
        post = MagicMock(side_effect=aiohttp.ClientError("boom"))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR

    async def test_timeout(self) -> None:
        post = MagicMock(side_effect=asyncio.TimeoutError())
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR
        assert "timed out" in (outcome.error or "")

    async def test_unexpected_error_becomes_outcome(self) -> None:
        post = MagicMock(side_effect=RuntimeError("Event loop is closed"))
        client = _client_with(post)

        outcome = await client.deliver(_msg(), _dest())
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR
        assert outcome.recipient == "alice"
        assert "RuntimeError" in (outcome.error or "")

    async def test_malformed_url(self) -> None:
        client = WebhookDeliveryClient()
        try:
            outcome = await client.deliver(_msg(), _dest(url="not a url"))
        finally:
            await client.close()
        assert outcome.status == DeliveryStatus.TRANSPORT_ERROR

    async def test_display_name_override_does_not_mutate_message(self) -> None:
        post = MagicMock(return_value=_mock_response(204))
        client = _client_with(post)
        msg = _msg()

        await client.deliver(msg, _dest(display_name="CI Bot"))
        await client.deliver(msg, _dest(display_name=None, recipient="bob"))

        first = post.call_args_list[0][1]["json"]
        second = post.call_args_list[1][1]["json"]
        assert first["username"] == "CI Bot"
        assert "username" not in second
        assert msg.username is None

    async def test_empty_display_name_ignored(self) -> None:
        post = MagicMock(return_value=_mock_response(204))
        client = _client_with(post)

        await client.deliver(_msg(username="Original"), _dest(display_name=""))
        assert post.call_args[1]["json"]["username"] == "Original"


# ── Session lifecycle ───────────────────────────────────────────


class TestSession:
    async def test_lazy_session_creation(self) -> None:
        client = WebhookDeliveryClient()
        assert client._session is None
        session = client._get_session()
        assert session is not None
        assert client._get_session() is session
        await client.close()
        assert client._session is None

    async def test_close_session(self) -> None:
        client = WebhookDeliveryClient()
        mock_session = AsyncMock()
        mock_session.closed = False
        client._session = mock_session
        client._session_loop = asyncio.get_running_loop()

        await client.close()
        mock_session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        client = WebhookDeliveryClient()
        await client.close()  # should not raise

    def test_delivers_across_event_loops(self, webhook_url: str) -> None:
        client = WebhookDeliveryClient(WebhookConfig(timeout_secs=5))
        dest = _dest(url=webhook_url)

        first = asyncio.run(client.deliver(_msg(), dest))
        second = asyncio.run(client.deliver(_msg(), dest))
        asyncio.run(client.close())

        assert first.status == DeliveryStatus.DELIVERED
        assert second.status == DeliveryStatus.DELIVERED
        assert second.http_status == 204

    async def test_session_recreated_for_new_loop(self) -> None:
        client = WebhookDeliveryClient()
        stale = MagicMock()
        stale.closed = False
        client._session = stale
        other_loop = asyncio.new_event_loop()
        client._session_loop = other_loop
        try:
            session = client._get_session()
            assert session is not stale
            assert client._session_loop is asyncio.get_running_loop()
            stale.detach.assert_called_once()
        finally:
            other_loop.close()
            await client.close()
