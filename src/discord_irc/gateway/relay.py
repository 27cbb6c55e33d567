"""Relay engine: route and rewrite messages between Discord and IRC."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from loguru import logger

from discord_irc.adapters.base import DiscordDirectory, DiscordSender, IRCSender
from discord_irc.errors import TargetChannelUnavailable, UnresolvedReference
from discord_irc.events import DiscordChannel, DiscordUser, RelayMessage
from discord_irc.formatting.discord_to_irc import is_command_message, to_irc
from discord_irc.formatting.irc_to_discord import to_discord
from discord_irc.formatting.nick_color import colorize
from discord_irc.gateway.router import ChannelMap


class RelayEngine:
    """Stateless apart from the read-only channel map; safe to call from both adapters."""

    def __init__(
        self,
        channel_map: ChannelMap,
        *,
        irc: IRCSender,
        discord: DiscordSender,
        directory: DiscordDirectory,
        irc_nick_color: bool = True,
        command_characters: Iterable[str] = (),
    ) -> None:
        self._channel_map = channel_map
        self._irc = irc
        self._discord = discord
        self._directory = directory
        self._irc_nick_color = irc_nick_color
        self._command_characters = frozenset(command_characters)

    @property
    def channel_map(self) -> ChannelMap:
        return self._channel_map

    # Discord -> IRC

    def send_to_irc(self, message: RelayMessage) -> None:
        """Relay a Discord message to its mapped IRC channel."""
        if message.author_id == self._directory.bot_user_id():
            return

        discord_channel = f"#{message.channel}"
        irc_channel = self._channel_map.irc_channel_for(discord_channel)
        logger.debug("Channel mapping {} -> {}", discord_channel, irc_channel)
        if not irc_channel:
            return

        try:
            text = to_irc(
                message.content,
                lambda user_id: self._mention_name(message, user_id),
                self._directory.channel_name,
            )
        except UnresolvedReference as exc:
            logger.warning("Dropping message from {} in {}: {}", message.author_name, discord_channel, exc)
            return

        outgoing = replace(
            message,
            content=text,
            is_command=is_command_message(text.strip(), self._command_characters),
        )
        for line in self._irc_lines(outgoing):
            logger.debug("Sending message to IRC {} {}", irc_channel, line)
            self._irc.say(irc_channel, line)

    def _irc_lines(self, message: RelayMessage) -> list[str]:
        """Lines for one transformed message, in send order."""
        nickname = message.display_name
        if message.is_command:
            # Commands go out as bare lines the receiving bot can parse
            return [f"Command sent from Discord by {nickname}:", message.content.strip()]

        display = colorize(nickname) if self._irc_nick_color else nickname
        lines = []
        if message.content:
            lines.append(f"<{display}> {message.content}")
        lines.extend(f"<{display}> {url}" for url in message.attachments)
        return lines

    def _mention_name(self, message: RelayMessage, user_id: str) -> str | None:
        """Display name for a mention token: mentioned users, then guild, then roles."""
        name = message.mentions.get(user_id)
        if name:
            return name
        if message.guild_id:
            nickname = self._directory.member_nickname(message.guild_id, user_id)
            if nickname:
                return nickname
        name = self._directory.user_name(user_id)
        if name:
            return name
        if message.guild_id:
            return self._directory.role_name(message.guild_id, user_id)
        return None

    # IRC -> Discord

    def send_to_discord(self, author: str, channel: str, text: str) -> None:
        """Relay an IRC channel message to its mapped Discord channel."""
        discord_channel = self._channel_map.discord_channel_for(channel)
        if not discord_channel:
            logger.debug("IRC channel {} is not bridged", channel)
            return

        try:
            target = self._target_channel(discord_channel)
        except TargetChannelUnavailable as exc:
            logger.info("{}", exc)
            return

        guild_id = target.guild_id
        content = to_discord(
            text,
            lambda token: self._directory.member_by_nickname(guild_id, token),
            lambda token: self._user_in_guild(guild_id, token),
        )
        line = f"**<{author}>** {content}"
        logger.debug("Sending message to Discord {} -> {}: {}", channel, discord_channel, line)
        self._discord.send(target, line)

    def send_notice_to_discord(self, author: str, channel: str, text: str) -> None:
        self.send_to_discord(author, channel, f"*{text}*")

    def send_action_to_discord(self, author: str, channel: str, text: str) -> None:
        self.send_to_discord(author, channel, f"_{text}_")

    def _target_channel(self, discord_channel: str) -> DiscordChannel:
        name = discord_channel[1:] if discord_channel.startswith("#") else discord_channel
        target = self._directory.text_channel_named(name)
        if target is None:
            raise TargetChannelUnavailable(
                f"Tried to send a message to a channel the bot isn't in: {discord_channel}",
                details={"channel": discord_channel},
            )
        return target

    def _user_in_guild(self, guild_id: str, username: str) -> DiscordUser | None:
        """User by username, carrying their nickname in the bridged guild."""
        user = self._directory.user_by_username(username)
        if user is None:
            return None
        return replace(user, nickname=self._directory.member_nickname(guild_id, user.id))

    # IRC invites

    def handle_invite(self, channel: str, inviter: str) -> None:
        """Join an IRC channel we were invited to, if it is bridged."""
        logger.debug("Received invite to {} from {}", channel, inviter)
        irc_channel = channel.lower()
        if self._channel_map.discord_channel_for(irc_channel) is None:
            logger.debug("Channel not found in config, not joining: {}", channel)
            return
        logger.debug("Joining channel: {}", irc_channel)
        self._irc.join(irc_channel, self._channel_map.join_keys.get(irc_channel))
