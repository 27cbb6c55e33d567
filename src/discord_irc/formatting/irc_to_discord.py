"""Convert IRC text for Discord: strip control codes, resolve @nick highlights."""

from __future__ import annotations

import re
from collections.abc import Callable

from discord_irc.events import DiscordUser

UserLookup = Callable[[str], DiscordUser | None]

# \x03NN[,NN] colors, \x04RRGGBB[,RRGGBB] hex colors
_COLOR_PATTERN = re.compile(r"\x03(?:\d{1,2}(?:,\d{1,2})?)?|\x04(?:[0-9a-fA-F]{6}(?:,[0-9a-fA-F]{6})?)?")
# bold, reset, monospace, reverse, italic, strikethrough, underline
_FORMAT_PATTERN = re.compile(r"[\x02\x0f\x11\x16\x1d\x1e\x1f]")

# @ followed by non-whitespace, trimmed back to a word boundary ("@bob!" -> "@bob")
_HIGHLIGHT_PATTERN = re.compile(r"@\S+\b")


def strip_irc_formatting(content: str) -> str:
    """Remove IRC color and formatting control codes."""
    return _FORMAT_PATTERN.sub("", _COLOR_PATTERN.sub("", content))


def nickname_permits(user: DiscordUser, token: str) -> bool:
    """Whether a username match may be used for ``token``.

    A user whose guild nickname differs from the token is known in the guild
    by another name, so the author is not necessarily addressing them.
    """
    return not user.nickname or user.nickname == token


def resolve_mention(
    token: str,
    find_by_nickname: UserLookup,
    find_by_username: UserLookup,
) -> DiscordUser | None:
    """Resolve an IRC highlight to a guild member: nickname first, then username."""
    member = find_by_nickname(token)
    if member is not None:
        return member
    user = find_by_username(token)
    if user is not None and nickname_permits(user, token):
        return user
    return None


def to_discord(
    content: str,
    find_by_nickname: UserLookup,
    find_by_username: UserLookup,
) -> str:
    """Strip IRC formatting and turn resolvable @name highlights into Discord mentions."""
    if not content:
        return content

    def _mention(match: re.Match[str]) -> str:
        user = resolve_mention(match.group(0)[1:], find_by_nickname, find_by_username)
        if user is None:
            return match.group(0)
        return f"<@{user.id}>"

    return _HIGHLIGHT_PATTERN.sub(_mention, strip_irc_formatting(content))
