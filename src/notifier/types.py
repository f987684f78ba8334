"""Domain types for webhook notifications and their delivery."""

from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, Field


class EmbedColor(IntEnum):
    """Embed side-bar colours, packed as 0xRRGGBB."""

    BLUE = 0x3498DB
    GREEN = 0x2ECC71
    RED = 0xE74C3C
    ORANGE = 0xF39C12


class EmbedField(BaseModel):
    """One name/value row inside an embed."""

    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    text: str
    icon_url: str | None = None


class EmbedThumbnail(BaseModel):
    url: str


class NotificationMessage(BaseModel):
    """A single-embed webhook message built from one CI event."""

    title: str
    description: str
    color: EmbedColor
    url: str | None = None
    timestamp: str | None = None
    footer: EmbedFooter | None = None
    thumbnail: EmbedThumbnail | None = None
    fields: list[EmbedField] = Field(default_factory=list)
    username: str | None = None
    source_event_type: str = ""


class Destination(BaseModel):
    """Where one recipient wants notifications delivered.

    An empty ``url`` is representable (the user left the setting blank) but
    is never sent to.
    """

    url: str = ""
    display_name: str | None = None
    recipient: str = ""


class DeliveryStatus(StrEnum):
    DELIVERED = "DELIVERED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


class DeliveryOutcome(BaseModel):
    """Result of delivering one message to one destination."""

    status: DeliveryStatus
    recipient: str = ""
    error: str | None = None
    http_status: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED
