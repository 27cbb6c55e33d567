"""Records passed between the adapters and the relay engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Origin = Literal["discord", "irc"]


@dataclass(frozen=True)
class DiscordUser:
    """A Discord user as seen from the bridged guild."""

    id: str
    username: str
    nickname: str | None = None  # guild-scoped

    @property
    def display_name(self) -> str:
        return self.nickname or self.username


@dataclass(frozen=True)
class DiscordChannel:
    """A Discord text channel the bot can post to."""

    id: str
    name: str
    guild_id: str


@dataclass(frozen=True)
class RelayMessage:
    """Inbound message, built per event and discarded after relaying."""

    origin: Origin
    author_id: str
    author_name: str
    channel: str  # without leading '#' for Discord
    content: str
    author_nickname: str | None = None
    guild_id: str | None = None
    attachments: tuple[str, ...] = ()
    mentions: dict[str, str] = field(default_factory=dict)  # user id -> display name
    is_command: bool = False

    @property
    def display_name(self) -> str:
        """Guild nickname when set, otherwise the base username."""
        return self.author_nickname or self.author_name
