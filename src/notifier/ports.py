"""Read-only lookups the notifier needs from the CI host.

The host implements these; the in-memory versions here back tests and the
smoke-test script.
"""

from __future__ import annotations

import abc

from pydantic import BaseModel

from src.notifier.types import Destination

# User property keys, as stored by the CI host.
WEBHOOK_URL_KEY = "DiscordWebHookURL"
WEBHOOK_USERNAME_KEY = "DiscordUsername"


class UserPropertyInfo(BaseModel):
    """A per-user setting the host should render in its notifier settings."""

    key: str
    label: str


class ProjectRegistry(abc.ABC):
    @abc.abstractmethod
    def lookup(self, project_id: str) -> str | None:
        """Return the project's display name, or None if unknown."""


class UserConfigResolver(abc.ABC):
    @abc.abstractmethod
    def resolve(self, recipient_id: str) -> Destination | None:
        """Return the recipient's destination, or None if nothing is stored."""


class NotificatorRegistry(abc.ABC):
    @abc.abstractmethod
    def register(
        self,
        notificator_type: str,
        display_name: str,
        properties: list[UserPropertyInfo],
    ) -> None:
        """Announce a notifier and the user properties it reads."""


class InMemoryProjectRegistry(ProjectRegistry):
    """Project id → name mapping."""

    def __init__(self, projects: dict[str, str] | None = None) -> None:
        self._projects: dict[str, str] = dict(projects or {})

    def add(self, project_id: str, name: str) -> None:
        self._projects[project_id] = name

    def lookup(self, project_id: str) -> str | None:
        return self._projects.get(project_id)


class UserPropertyStore(UserConfigResolver):
    """Per-user property bag keyed like the host's user properties.

    Usage::

        store = UserPropertyStore()
        store.set_property("alice", WEBHOOK_URL_KEY, "https://...")
        store.set_property("alice", WEBHOOK_USERNAME_KEY, "CI Bot")
        store.resolve("alice")  # Destination(url="https://...", ...)
    """

    def __init__(self, properties: dict[str, dict[str, str]] | None = None) -> None:
        self._properties: dict[str, dict[str, str]] = {
            user: dict(props) for user, props in (properties or {}).items()
        }

    def set_property(self, recipient_id: str, key: str, value: str) -> None:
        self._properties.setdefault(recipient_id, {})[key] = value

    def get_property(self, recipient_id: str, key: str) -> str | None:
        return self._properties.get(recipient_id, {}).get(key)

    def resolve(self, recipient_id: str) -> Destination | None:
        props = self._properties.get(recipient_id)
        if props is None:
            return None
        return Destination(
            url=(props.get(WEBHOOK_URL_KEY) or "").strip(),
            display_name=props.get(WEBHOOK_USERNAME_KEY) or None,
            recipient=recipient_id,
        )


class InMemoryNotificatorRegistry(NotificatorRegistry):
    """Records registrations instead of rendering them in a UI."""

    def __init__(self) -> None:
        self.registered: dict[str, tuple[str, list[UserPropertyInfo]]] = {}

    def register(
        self,
        notificator_type: str,
        display_name: str,
        properties: list[UserPropertyInfo],
    ) -> None:
        self.registered[notificator_type] = (display_name, list(properties))
