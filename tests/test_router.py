"""Test channel map construction and lookups."""

import pytest

from discord_irc.errors import ConfigurationError
from discord_irc.gateway.router import ChannelMap


class TestChannelMapBuild:
    def test_forward_and_inverse(self):
        channel_map = ChannelMap.build({"#discord": "#irc"})
        assert dict(channel_map.forward) == {"#discord": "#irc"}
        assert dict(channel_map.inverse) == {"#irc": "#discord"}

    def test_irc_names_lowercased_discord_names_preserved(self):
        channel_map = ChannelMap.build({"#Discord": "#IRC"})
        assert channel_map.irc_channel_for("#Discord") == "#irc"
        assert channel_map.irc_channel_for("#discord") is None
        assert channel_map.inverse["#irc"] == "#Discord"

    def test_join_key_stripped_and_kept_separately(self):
        channel_map = ChannelMap.build({"#discord": "#irc channelKey", "#other": "#open"})
        assert channel_map.forward["#discord"] == "#irc"
        assert dict(channel_map.join_keys) == {"#irc": "channelKey"}
        assert sorted(channel_map.irc_channels()) == [("#irc", "channelKey"), ("#open", None)]

    def test_key_only_split_on_first_space(self):
        channel_map = ChannelMap.build({"#discord": "#irc  key with spaces"})
        assert channel_map.join_keys["#irc"] == "key with spaces"

    def test_len(self):
        assert len(ChannelMap.build({"#a": "#x", "#b": "#y"})) == 2

    @pytest.mark.parametrize("raw", [{}, None, [], "#discord"])
    def test_empty_or_non_mapping_rejected(self, raw):
        with pytest.raises(ConfigurationError):
            ChannelMap.build(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            {"": "#irc"},
            {"   ": "#irc"},
            {"#discord": ""},
            {"#discord": "   "},
            {"#discord": None},
            {"#discord": 5},
        ],
    )
    def test_malformed_entries_rejected(self, raw):
        with pytest.raises(ConfigurationError):
            ChannelMap.build(raw)

    def test_duplicate_irc_channel_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ChannelMap.build({"#one": "#irc", "#two": "#IRC key"})
        assert exc_info.value.details == {"irc_channel": "#irc"}


class TestChannelMapLookup:
    def test_discord_channel_for_is_case_insensitive(self):
        channel_map = ChannelMap.build({"#discord": "#irc"})
        assert channel_map.discord_channel_for("#IRC") == "#discord"

    def test_unmapped_returns_none(self):
        channel_map = ChannelMap.build({"#discord": "#irc"})
        assert channel_map.irc_channel_for("#wrongdiscord") is None
        assert channel_map.discord_channel_for("#otherirc") is None

    def test_mappings_are_read_only(self):
        channel_map = ChannelMap.build({"#discord": "#irc"})
        with pytest.raises(TypeError):
            channel_map.forward["#new"] = "#new"  # type: ignore[index]
        with pytest.raises(TypeError):
            channel_map.inverse["#new"] = "#new"  # type: ignore[index]

    def test_build_does_not_alias_input(self):
        raw = {"#discord": "#irc"}
        channel_map = ChannelMap.build(raw)
        raw["#later"] = "#later"
        assert channel_map.irc_channel_for("#later") is None
