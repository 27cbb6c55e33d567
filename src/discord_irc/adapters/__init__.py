"""Protocol adapters. Each implements base.AdapterBase and the engine's capabilities."""

from discord_irc.adapters.base import AdapterBase, DiscordDirectory, DiscordSender, IRCSender
from discord_irc.adapters.disc import DiscordAdapter
from discord_irc.adapters.irc import IRCAdapter

__all__ = [
    "AdapterBase",
    "DiscordAdapter",
    "DiscordDirectory",
    "DiscordSender",
    "IRCAdapter",
    "IRCSender",
]
