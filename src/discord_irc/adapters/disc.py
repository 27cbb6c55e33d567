"""Discord adapter: discord.py client, directory lookups and ordered outbound queue."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import discord
from loguru import logger

from discord_irc.adapters.base import AdapterBase
from discord_irc.events import DiscordChannel, DiscordUser, RelayMessage

if TYPE_CHECKING:
    from discord_irc.gateway.relay import RelayEngine

# IRC users must not be able to ping @everyone, @here or roles through the bot
_ALLOWED_MENTIONS = discord.AllowedMentions(everyone=False, roles=False)


def _snowflake(value: str) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _nickname(user: discord.abc.User) -> str | None:
    """Guild nickname for members, None for plain users."""
    return getattr(user, "nick", None)


def relay_message_from(message: discord.Message) -> RelayMessage | None:
    """Build a RelayMessage from a guild message. None for DMs."""
    if message.guild is None:
        return None
    author = message.author
    return RelayMessage(
        origin="discord",
        author_id=str(author.id),
        author_name=author.name,
        author_nickname=_nickname(author),
        channel=getattr(message.channel, "name", "") or "",
        content=message.content or "",
        guild_id=str(message.guild.id),
        attachments=tuple(a.url for a in message.attachments),
        mentions={str(u.id): _nickname(u) or u.name for u in message.mentions},
    )


class DiscordAdapter(AdapterBase):
    """Discord side of the bridge. Also the engine's Discord directory and sender."""

    def __init__(self, token: str) -> None:
        self._token = token
        self._client: discord.Client | None = None
        self._engine: RelayEngine | None = None
        self._outbound: asyncio.Queue[tuple[DiscordChannel, str]] = asyncio.Queue()
        self._consumer_task: asyncio.Task | None = None
        self._client_task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return "discord"

    # Sender

    def send(self, channel: DiscordChannel, text: str) -> None:
        """Queue text for a channel; messages go out in call order."""
        self._outbound.put_nowait((channel, text))

    async def _consume_outbound(self) -> None:
        while True:
            try:
                channel, text = await self._outbound.get()
                await self._send_now(channel, text)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("Discord send failed: {}", exc)

    async def _send_now(self, channel: DiscordChannel, text: str) -> None:
        if not self._client:
            return
        target = self._client.get_channel(int(channel.id))
        if not isinstance(target, discord.TextChannel):
            logger.warning("Discord channel {} not found or not a text channel", channel.name)
            return
        await target.send(text, allowed_mentions=_ALLOWED_MENTIONS)

    # Directory

    def _guild(self, guild_id: str) -> discord.Guild | None:
        snowflake = _snowflake(guild_id)
        if not self._client or snowflake is None:
            return None
        return self._client.get_guild(snowflake)

    def bot_user_id(self) -> str | None:
        if self._client and self._client.user:
            return str(self._client.user.id)
        return None

    def text_channel_named(self, name: str) -> DiscordChannel | None:
        if not self._client:
            return None
        for guild in self._client.guilds:
            channel = discord.utils.get(guild.text_channels, name=name)
            if channel:
                return DiscordChannel(id=str(channel.id), name=channel.name, guild_id=str(guild.id))
        return None

    def channel_name(self, channel_id: str) -> str | None:
        snowflake = _snowflake(channel_id)
        if not self._client or snowflake is None:
            return None
        return getattr(self._client.get_channel(snowflake), "name", None)

    def member_by_nickname(self, guild_id: str, nickname: str) -> DiscordUser | None:
        guild = self._guild(guild_id)
        if not guild:
            return None
        member = discord.utils.get(guild.members, nick=nickname)
        if not member:
            return None
        return DiscordUser(id=str(member.id), username=member.name, nickname=member.nick)

    def user_by_username(self, username: str) -> DiscordUser | None:
        if not self._client:
            return None
        user = discord.utils.get(self._client.users, name=username)
        if not user:
            return None
        return DiscordUser(id=str(user.id), username=user.name)

    def member_nickname(self, guild_id: str, user_id: str) -> str | None:
        guild = self._guild(guild_id)
        snowflake = _snowflake(user_id)
        if not guild or snowflake is None:
            return None
        member = guild.get_member(snowflake)
        return member.nick if member else None

    def user_name(self, user_id: str) -> str | None:
        snowflake = _snowflake(user_id)
        if not self._client or snowflake is None:
            return None
        user = self._client.get_user(snowflake)
        return user.name if user else None

    def role_name(self, guild_id: str, role_id: str) -> str | None:
        guild = self._guild(guild_id)
        snowflake = _snowflake(role_id)
        if not guild or snowflake is None:
            return None
        role = guild.get_role(snowflake)
        return role.name if role else None

    # Inbound

    async def _on_message(self, message: discord.Message) -> None:
        """Handle a Discord message; one failing message never stops the client."""
        if self._engine is None:
            return
        relay_message = relay_message_from(message)
        if relay_message is None:
            return
        try:
            self._engine.send_to_irc(relay_message)
        except Exception as exc:
            logger.exception("Failed to relay Discord message {}: {}", message.id, exc)

    def _create_client(self) -> discord.Client:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.members = True
        return discord.Client(intents=intents)

    async def start(self, engine: RelayEngine) -> None:
        """Log in and start the outbound consumer."""
        if not self._token:
            logger.warning("Discord token not set; Discord adapter disabled")
            return

        self._engine = engine
        client = self._create_client()

        @client.event
        async def on_ready() -> None:
            logger.info("Connected to Discord as {}", client.user)

        @client.event
        async def on_message(message: discord.Message) -> None:
            await self._on_message(message)

        self._client = client
        self._consumer_task = asyncio.create_task(self._consume_outbound())
        self._client_task = asyncio.create_task(client.start(self._token))

    async def stop(self) -> None:
        """Stop consumer and close the client."""
        if self._consumer_task:
            self._consumer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer_task
        if self._client:
            await self._client.close()
        if self._client_task:
            self._client_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._client_task
        self._client = None
        self._client_task = None
        self._consumer_task = None
