"""Convert Discord message markup to single-line plain text for IRC."""

from __future__ import annotations

import re
from collections.abc import Callable, Collection

from discord_irc.errors import UnresolvedReference

Resolver = Callable[[str], str | None]

# Rewrite rules in precedence order. They are combined into one pattern and
# applied in a single left-to-right scan, so replacement text is never
# re-matched by a later rule.
REWRITE_RULES: tuple[tuple[str, str], ...] = (
    # <@id>, <@!id> (explicit nickname), <@&id> (role)
    ("mention", r"<@[!&]?(?P<user_id>\d+)>"),
    # IRC lines cannot carry line breaks
    ("newline", r"\r\n|\r|\n"),
    ("channel", r"<#(?P<channel_id>\d+)>"),
    # <:name:id> and animated <a:name:id>
    ("emote", r"<a?(?P<emote_name>:\w+:)\d+>"),
)

_TOKEN_PATTERN = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in REWRITE_RULES))


def to_irc(content: str, resolve_mention: Resolver, resolve_channel: Resolver) -> str:
    """Rewrite Discord mentions, line breaks, channel refs and emotes for IRC.

    ``resolve_mention`` maps a user id to a display name and ``resolve_channel``
    maps a channel id to its name. Either returning None raises
    UnresolvedReference; a partially rewritten line is never returned.
    """
    if not content:
        return content

    def _rewrite(match: re.Match[str]) -> str:
        if match.group("mention") is not None:
            user_id = match.group("user_id")
            name = resolve_mention(user_id)
            if name is None:
                raise UnresolvedReference(
                    f"Unknown user in mention {match.group(0)}",
                    code="mention",
                    details={"user_id": user_id},
                )
            return f"@{name}"
        if match.group("newline") is not None:
            return " "
        if match.group("channel") is not None:
            channel_id = match.group("channel_id")
            name = resolve_channel(channel_id)
            if name is None:
                raise UnresolvedReference(
                    f"Unknown channel in reference {match.group(0)}",
                    code="channel",
                    details={"channel_id": channel_id},
                )
            return f"#{name}"
        return match.group("emote_name")

    return _TOKEN_PATTERN.sub(_rewrite, content)


def is_command_message(content: str, command_characters: Collection[str]) -> bool:
    """True if content starts with one of the configured command characters."""
    return bool(content) and content[0] in command_characters
