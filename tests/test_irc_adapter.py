"""Test IRC adapter and pydle client event forwarding."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pydle
import pytest

from discord_irc.adapters import irc as irc_module
from discord_irc.adapters.irc import IRCAdapter, IRCClient, connect_with_retry
from discord_irc.config import Config
from discord_irc.gateway.router import ChannelMap

CONFIG = {
    "server": "irc.example.net",
    "nickname": "bridge",
    "discord_token": "token",
    "channel_mapping": {"#discord": "#irc key"},
    "auto_send_commands": [["PRIVMSG", "NickServ", "IDENTIFY pw"]],
    "irc_options": {"flood_protection_delay": 0},
}


def make_client(**kwargs) -> IRCClient:
    client = IRCClient("bridge", [("#irc", "key"), ("#open", None)], **kwargs)
    client.engine = Mock()
    return client


async def drain(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)


class TestIRCClient:
    @pytest.mark.asyncio
    async def test_channel_message_forwarded(self):
        client = make_client()
        await client.on_channel_message("#irc", "alice", "hello")
        client.engine.send_to_discord.assert_called_once_with("alice", "#irc", "hello")

    @pytest.mark.asyncio
    async def test_own_message_not_forwarded(self):
        client = make_client()
        client.nickname = "bridge"
        await client.on_channel_message("#irc", "bridge", "echo")
        client.engine.send_to_discord.assert_not_called()

    @pytest.mark.asyncio
    async def test_channel_notice_forwarded(self):
        client = make_client()
        await client.on_notice("#irc", "alice", "heads up")
        client.engine.send_notice_to_discord.assert_called_once_with("alice", "#irc", "heads up")

    @pytest.mark.asyncio
    async def test_private_notice_ignored(self):
        client = make_client()
        await client.on_notice("bridge", "NickServ", "identify please")
        client.engine.send_notice_to_discord.assert_not_called()

    @pytest.mark.asyncio
    async def test_action_forwarded(self):
        client = make_client()
        await client.on_ctcp_action("alice", "#irc", "waves")
        client.engine.send_action_to_discord.assert_called_once_with("alice", "#irc", "waves")

    @pytest.mark.asyncio
    async def test_own_and_private_actions_ignored(self):
        client = make_client()
        client.nickname = "bridge"
        await client.on_ctcp_action("bridge", "#irc", "waves")
        await client.on_ctcp_action("alice", "bridge", "waves")
        client.engine.send_action_to_discord.assert_not_called()

    @pytest.mark.asyncio
    async def test_invite_forwarded(self):
        client = make_client()
        await client.on_invite("#irc", "alice")
        client.engine.handle_invite.assert_called_once_with("#irc", "alice")

    @pytest.mark.asyncio
    async def test_engine_failure_contained(self):
        client = make_client()
        client.engine.send_to_discord.side_effect = RuntimeError("boom")
        await client.on_channel_message("#irc", "alice", "hello")
        await client.on_channel_message("#irc", "alice", "again")
        assert client.engine.send_to_discord.call_count == 2

    @pytest.mark.asyncio
    async def test_on_connect_sends_commands_then_joins_with_keys(self):
        client = make_client(auto_send_commands=[["PRIVMSG", "NickServ", "IDENTIFY pw"]])
        calls: list[tuple] = []
        client.rawmsg = AsyncMock(side_effect=lambda *a: calls.append(("raw", *a)))
        client.join = AsyncMock(side_effect=lambda c, password=None: calls.append(("join", c, password)))
        with patch.object(pydle.Client, "on_connect", new=AsyncMock()):
            await client.on_connect()
        assert calls == [
            ("raw", "PRIVMSG", "NickServ", "IDENTIFY pw"),
            ("join", "#irc", "key"),
            ("join", "#open", None),
        ]
        assert client.ready.is_set()

    @pytest.mark.asyncio
    async def test_retry_count_sets_pydle_reconnect_attempts(self):
        client = make_client(retry_count=3)
        assert client.RECONNECT_MAX_ATTEMPTS == 3


class TestConnectWithRetry:
    @pytest.fixture(autouse=True)
    def no_backoff(self, monkeypatch):
        monkeypatch.setattr(irc_module, "_BACKOFF_MIN", 0)
        monkeypatch.setattr(irc_module, "_BACKOFF_MAX", 0)

    @pytest.mark.asyncio
    async def test_retries_on_oserror(self):
        client = Mock()
        client.connect = AsyncMock(side_effect=[OSError("refused"), None])
        await connect_with_retry(client, "irc.example.net", 6667, attempts=3)
        assert client.connect.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self):
        client = Mock()
        client.connect = AsyncMock(side_effect=OSError("refused"))
        with pytest.raises(OSError):
            await connect_with_retry(client, "irc.example.net", 6667, attempts=2)
        assert client.connect.await_count == 2


class TestIRCAdapter:
    def make_adapter(self) -> IRCAdapter:
        config = Config(dict(CONFIG))
        return IRCAdapter(config, ChannelMap.build(config.channel_mapping))

    def fake_client(self) -> Mock:
        client = Mock()
        client.ready = asyncio.Event()
        client.ready.set()
        client.message = AsyncMock()
        client.join = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_name(self):
        assert self.make_adapter().name == "irc"

    @pytest.mark.asyncio
    async def test_lines_sent_in_order(self):
        adapter = self.make_adapter()
        adapter._client = client = self.fake_client()
        task = asyncio.create_task(adapter._consume_outbound())
        adapter.say("#irc", "first")
        adapter.say("#irc", "second")
        await drain(lambda: client.message.await_count == 2)
        task.cancel()
        assert [c.args for c in client.message.await_args_list] == [("#irc", "first"), ("#irc", "second")]

    @pytest.mark.asyncio
    async def test_long_line_split(self):
        adapter = self.make_adapter()
        adapter._client = client = self.fake_client()
        task = asyncio.create_task(adapter._consume_outbound())
        adapter.say("#irc", "x" * 1000)
        await drain(lambda: client.message.await_count == 3)
        task.cancel()
        assert "".join(c.args[1] for c in client.message.await_args_list) == "x" * 1000

    @pytest.mark.asyncio
    async def test_send_failure_does_not_stop_consumer(self):
        adapter = self.make_adapter()
        adapter._client = client = self.fake_client()
        client.message.side_effect = [RuntimeError("gone"), None]
        task = asyncio.create_task(adapter._consume_outbound())
        adapter.say("#irc", "lost")
        adapter.say("#irc", "kept")
        await drain(lambda: client.message.await_count == 2)
        task.cancel()
        assert client.message.await_args_list[-1].args == ("#irc", "kept")

    @pytest.mark.asyncio
    async def test_waits_until_ready(self):
        adapter = self.make_adapter()
        adapter._client = client = self.fake_client()
        client.ready.clear()
        task = asyncio.create_task(adapter._consume_outbound())
        adapter.say("#irc", "queued")
        await drain(lambda: False, attempts=10)
        client.message.assert_not_awaited()
        client.ready.set()
        await drain(lambda: client.message.await_count == 1)
        task.cancel()
        client.message.assert_awaited_once_with("#irc", "queued")

    @pytest.mark.asyncio
    async def test_join_without_client_is_noop(self):
        adapter = self.make_adapter()
        adapter.join("#irc", "key")

    @pytest.mark.asyncio
    async def test_join_with_key(self):
        adapter = self.make_adapter()
        adapter._client = client = self.fake_client()
        adapter.join("#irc", "key")
        await drain(lambda: client.join.await_count == 1)
        client.join.assert_awaited_once_with("#irc", password="key")

    @pytest.mark.asyncio
    async def test_create_client_uses_config(self):
        client = self.make_adapter()._create_client()
        assert isinstance(client, IRCClient)
        assert client._bridge_channels == [("#irc", "key")]
        assert client._auto_send_commands == [["PRIVMSG", "NickServ", "IDENTIFY pw"]]
