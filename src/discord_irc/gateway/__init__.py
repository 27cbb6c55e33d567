"""Gateway: channel map and relay engine."""

from discord_irc.gateway.relay import RelayEngine
from discord_irc.gateway.router import ChannelMap

__all__ = ["ChannelMap", "RelayEngine"]
