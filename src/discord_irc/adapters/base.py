"""Capabilities the relay engine needs from the protocol adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

from discord_irc.events import DiscordChannel, DiscordUser

if TYPE_CHECKING:
    from discord_irc.gateway.relay import RelayEngine


class IRCSender(Protocol):
    """Outbound IRC side. Calls are fire-and-forget."""

    def say(self, channel: str, text: str) -> None:
        """Queue a PRIVMSG line for a channel."""
        ...

    def join(self, channel: str, key: str | None = None) -> None:
        """Join a channel, with its key when it has one."""
        ...


class DiscordSender(Protocol):
    """Outbound Discord side. Calls are fire-and-forget."""

    def send(self, channel: DiscordChannel, text: str) -> None:
        """Queue a message for a text channel."""
        ...


class DiscordDirectory(Protocol):
    """Read-only lookups against the bot's view of Discord."""

    def bot_user_id(self) -> str | None:
        """The bridge's own user id, once logged in."""
        ...

    def text_channel_named(self, name: str) -> DiscordChannel | None:
        """Text channel (never voice or category) with this name."""
        ...

    def channel_name(self, channel_id: str) -> str | None:
        ...

    def member_by_nickname(self, guild_id: str, nickname: str) -> DiscordUser | None:
        """Guild member whose guild nickname is exactly ``nickname``."""
        ...

    def user_by_username(self, username: str) -> DiscordUser | None:
        """Any user the bot can see with this username (no nickname set)."""
        ...

    def member_nickname(self, guild_id: str, user_id: str) -> str | None:
        ...

    def user_name(self, user_id: str) -> str | None:
        """Base username for a user id."""
        ...

    def role_name(self, guild_id: str, role_id: str) -> str | None:
        ...


class AdapterBase(ABC):
    """Protocol connection: start delivering events to the engine, stop cleanly."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier ('discord' or 'irc')."""
        ...

    @abstractmethod
    async def start(self, engine: RelayEngine) -> None:
        """Connect and start delivering inbound events to ``engine``."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Disconnect and cleanup."""
        ...
