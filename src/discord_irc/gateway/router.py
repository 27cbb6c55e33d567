"""Channel map: Discord channel <-> IRC channel, built once from config."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from loguru import logger

from discord_irc.errors import ConfigurationError


def _split_irc_entry(discord_channel: str, irc_entry: str) -> tuple[str, str | None]:
    """Split '#chan key' into ('#chan', 'key'). Name is lowercased."""
    name, _, key = irc_entry.strip().partition(" ")
    name = name.lower()
    if not name:
        raise ConfigurationError(
            f"Empty IRC channel for Discord channel {discord_channel}",
            code="channel_mapping",
        )
    return name, key.strip() or None


class ChannelMap:
    """Bidirectional Discord <-> IRC channel association. Immutable after build."""

    def __init__(
        self,
        forward: Mapping[str, str],
        inverse: Mapping[str, str],
        join_keys: Mapping[str, str] | None = None,
    ) -> None:
        self._forward = MappingProxyType(dict(forward))
        self._inverse = MappingProxyType(dict(inverse))
        self._join_keys = MappingProxyType(dict(join_keys or {}))

    @classmethod
    def build(cls, raw: Any) -> ChannelMap:
        """Build from a raw {'#discord': '#irc [key]'} mapping.

        Join keys are stripped from the stored IRC names and kept in
        ``join_keys`` for the IRC connection. Raises ConfigurationError on an
        empty or malformed mapping, and when two Discord channels map to the
        same IRC channel.
        """
        if not isinstance(raw, Mapping) or not raw:
            raise ConfigurationError(
                "channel_mapping must contain at least one channel pair",
                code="channel_mapping",
            )

        forward: dict[str, str] = {}
        inverse: dict[str, str] = {}
        join_keys: dict[str, str] = {}
        for discord_channel, irc_entry in raw.items():
            if not isinstance(discord_channel, str) or not discord_channel.strip():
                raise ConfigurationError(
                    f"Invalid Discord channel in mapping: {discord_channel!r}",
                    code="channel_mapping",
                )
            if not isinstance(irc_entry, str):
                raise ConfigurationError(
                    f"Invalid IRC channel for Discord channel {discord_channel}: {irc_entry!r}",
                    code="channel_mapping",
                )
            irc_channel, key = _split_irc_entry(discord_channel, irc_entry)
            if irc_channel in inverse:
                raise ConfigurationError(
                    f"IRC channel {irc_channel} is mapped to both "
                    f"{inverse[irc_channel]} and {discord_channel}",
                    code="channel_mapping",
                    details={"irc_channel": irc_channel},
                )
            forward[discord_channel] = irc_channel
            inverse[irc_channel] = discord_channel
            if key:
                join_keys[irc_channel] = key

        logger.info(
            "Channel map: loaded {} mappings{}",
            len(forward),
            f" ({len(join_keys)} with keys)" if join_keys else "",
        )
        return cls(forward, inverse, join_keys)

    @property
    def forward(self) -> Mapping[str, str]:
        """Discord channel ('#name') -> IRC channel (lowercase)."""
        return self._forward

    @property
    def inverse(self) -> Mapping[str, str]:
        """IRC channel (lowercase) -> Discord channel ('#name')."""
        return self._inverse

    @property
    def join_keys(self) -> Mapping[str, str]:
        """IRC channel (lowercase) -> channel key, for keyed channels only."""
        return self._join_keys

    def irc_channel_for(self, discord_channel: str) -> str | None:
        """IRC channel bridged to a Discord channel, or None."""
        return self._forward.get(discord_channel)

    def discord_channel_for(self, irc_channel: str) -> str | None:
        """Discord channel bridged to an IRC channel (case-insensitive), or None."""
        return self._inverse.get(irc_channel.lower())

    def irc_channels(self) -> list[tuple[str, str | None]]:
        """(channel, key) pairs to join on connect."""
        return [(name, self._join_keys.get(name)) for name in self._inverse]

    def __len__(self) -> int:
        return len(self._forward)
