"""Tests for IRC nickname coloring."""

import pytest

from discord_irc.formatting.nick_color import COLOR_CODES, NICK_COLORS, color_for, colorize, wrap


class TestColorFor:
    @pytest.mark.parametrize(
        "name,color",
        [
            ("otherauthor", "light_red"),  # (111 + 11) % 12 == 2
            ("test", "light_blue"),  # (116 + 4) % 12 == 0
        ],
    )
    def test_known_assignments(self, name, color):
        assert color_for(name) == color

    def test_stable_across_calls(self):
        assert {color_for("testuser") for _ in range(10)} == {color_for("testuser")}

    def test_empty_name(self):
        assert color_for("") == NICK_COLORS[0]

    def test_palette_has_twelve_known_colors(self):
        assert len(NICK_COLORS) == 12
        assert all(color in COLOR_CODES for color in NICK_COLORS)


class TestColorize:
    def test_wraps_with_code_and_reset(self):
        assert colorize("otherauthor") == "\x0304otherauthor\x0f"
        assert colorize("test") == "\x0312test\x0f"

    def test_wrap(self):
        assert wrap("dark_green", "x") == "\x0303x\x0f"
