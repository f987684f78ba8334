"""Exception hierarchy for notification delivery."""

from __future__ import annotations


class NotifierError(Exception):
    """Base exception for all notifier errors."""


class ConfigurationError(NotifierError):
    """A destination has no usable webhook URL."""


class TransportError(NotifierError):
    """The webhook request failed (network, bad URL, timeout or HTTP status)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
