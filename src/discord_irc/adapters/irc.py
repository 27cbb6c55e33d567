"""IRC adapter: pydle client delivering channel traffic to the relay engine."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pydle
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from discord_irc.adapters.base import AdapterBase
from discord_irc.adapters.throttle import TokenBucket
from discord_irc.formatting.irc_message_split import split_irc_message

if TYPE_CHECKING:
    from discord_irc.config import Config
    from discord_irc.gateway.relay import RelayEngine
    from discord_irc.gateway.router import ChannelMap

# Backoff between connection attempts: 2s doubling up to 60s
_BACKOFF_MIN = 2
_BACKOFF_MAX = 60


class IRCClient(pydle.Client):
    """Pydle client: joins mapped channels and forwards their traffic."""

    def __init__(
        self,
        nickname: str,
        channels: list[tuple[str, str | None]],
        *,
        auto_send_commands: list[list[str]] | None = None,
        retry_count: int = 10,
        **kwargs: Any,
    ) -> None:
        super().__init__(nickname, **kwargs)
        self._bridge_channels = channels
        self._auto_send_commands = auto_send_commands or []
        self.engine: RelayEngine | None = None
        self.ready = asyncio.Event()
        # pydle's own reconnect after a dropped connection
        self.RECONNECT_MAX_ATTEMPTS = retry_count

    async def on_connect(self) -> None:
        """After registration, send configured raw commands, then join channels."""
        await super().on_connect()
        logger.info("Connected to IRC")
        for command in self._auto_send_commands:
            await self.rawmsg(*command)
        for channel, key in self._bridge_channels:
            await self.join(channel, password=key)
        self.ready.set()

    async def on_disconnect(self, expected: bool) -> None:
        self.ready.clear()
        if expected:
            logger.info("Disconnected from IRC")
        else:
            logger.warning("Lost connection to IRC")
        await super().on_disconnect(expected)

    def _deliver(self, handler: Callable[..., None], *args: str) -> None:
        """Pass one event to the engine. A failing event never stops the client."""
        if self.engine is None:
            return
        try:
            handler(*args)
        except Exception as exc:
            logger.exception("Failed to relay IRC event {}: {}", args, exc)

    def _is_own(self, nick: str | None) -> bool:
        return nick is None or self.is_same_nick(nick, self.nickname)

    async def on_channel_message(self, target: str, by: str, message: str) -> None:
        await super().on_channel_message(target, by, message)
        if self._is_own(by) or self.engine is None:
            return
        self._deliver(self.engine.send_to_discord, by, target, message)

    async def on_notice(self, target: str, by: str, message: str) -> None:
        await super().on_notice(target, by, message)
        if self._is_own(by) or not self.is_channel(target) or self.engine is None:
            return
        self._deliver(self.engine.send_notice_to_discord, by, target, message)

    async def on_ctcp_action(self, by: str, target: str, contents: str) -> None:
        # pydle dispatches CTCP only to handlers defined on the subclass
        if self._is_own(by) or not self.is_channel(target) or self.engine is None:
            return
        self._deliver(self.engine.send_action_to_discord, by, target, contents)

    async def on_invite(self, channel: str, by: str) -> None:
        await super().on_invite(channel, by)
        if self.engine is None:
            return
        self._deliver(self.engine.handle_invite, channel, by)


async def connect_with_retry(
    client: IRCClient,
    hostname: str,
    port: int,
    *,
    attempts: int = 10,
    **kwargs: Any,
) -> None:
    """Connect with exponential backoff; re-raise after the last attempt."""
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=_BACKOFF_MIN, max=_BACKOFF_MAX),
        retry=retry_if_exception_type(OSError),
        before_sleep=lambda state: logger.warning(
            "IRC connect failed (attempt {}): {}",
            state.attempt_number,
            state.outcome.exception() if state.outcome else None,
        ),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            await client.connect(hostname=hostname, port=port, **kwargs)


class IRCAdapter(AdapterBase):
    """IRC side of the bridge: inbound events to the engine, ordered throttled outbound."""

    def __init__(self, config: Config, channel_map: ChannelMap) -> None:
        self._config = config
        self._channel_map = channel_map
        self._client: IRCClient | None = None
        self._outbound: asyncio.Queue[tuple[str, str]] = asyncio.Queue()
        self._throttle = TokenBucket(interval=config.irc_flood_protection_delay)
        self._consumer_task: asyncio.Task | None = None
        self._connect_task: asyncio.Task | None = None
        self._join_tasks: set[asyncio.Task] = set()

    @property
    def name(self) -> str:
        return "irc"

    def say(self, channel: str, text: str) -> None:
        """Queue a line; lines go out in call order."""
        self._outbound.put_nowait((channel, text))

    def join(self, channel: str, key: str | None = None) -> None:
        if not self._client:
            return
        task = asyncio.create_task(self._client.join(channel, password=key))
        self._join_tasks.add(task)
        task.add_done_callback(self._join_tasks.discard)

    def _create_client(self) -> IRCClient:
        return IRCClient(
            self._config.nickname,
            self._channel_map.irc_channels(),
            auto_send_commands=self._config.auto_send_commands,
            retry_count=self._config.irc_retry_count,
            username=self._config.irc_username,
            realname=self._config.irc_realname,
        )

    async def _consume_outbound(self) -> None:
        """Send queued lines once connected, split to fit, paced by the token bucket."""
        while True:
            try:
                channel, text = await self._outbound.get()
                client = self._client
                if client is None:
                    continue
                await client.ready.wait()
                for chunk in split_irc_message(text):
                    await self._throttle.wait()
                    await client.message(channel, chunk)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("IRC send failed: {}", exc)

    async def start(self, engine: RelayEngine) -> None:
        """Connect to the IRC server and start the outbound consumer."""
        logger.debug("Connecting to IRC")
        self._client = self._create_client()
        self._client.engine = engine
        self._consumer_task = asyncio.create_task(self._consume_outbound())
        self._connect_task = asyncio.create_task(
            connect_with_retry(
                self._client,
                self._config.server,
                self._config.irc_port,
                attempts=self._config.irc_retry_count,
                tls=self._config.irc_tls,
                tls_verify=self._config.irc_tls_verify,
                password=self._config.irc_password,
            )
        )
        logger.info(
            "IRC connection started: {}:{}, channels {}",
            self._config.server,
            self._config.irc_port,
            [name for name, _ in self._channel_map.irc_channels()],
        )

    async def stop(self) -> None:
        """Stop consumer and disconnect."""
        for task in (self._consumer_task, self._connect_task):
            if task:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        if self._client and self._client.connected:
            await self._client.disconnect(expected=True)
        self._client = None
        self._consumer_task = None
        self._connect_task = None
