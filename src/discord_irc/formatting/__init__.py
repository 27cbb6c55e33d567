"""Text rewriting between Discord markup and IRC lines."""

from discord_irc.formatting.discord_to_irc import is_command_message, to_irc
from discord_irc.formatting.irc_message_split import split_irc_message
from discord_irc.formatting.irc_to_discord import resolve_mention, strip_irc_formatting, to_discord
from discord_irc.formatting.nick_color import NICK_COLORS, color_for, colorize

__all__ = [
    "NICK_COLORS",
    "color_for",
    "colorize",
    "is_command_message",
    "resolve_mention",
    "split_irc_message",
    "strip_irc_formatting",
    "to_discord",
    "to_irc",
]
