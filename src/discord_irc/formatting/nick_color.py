"""Deterministic IRC colors for relayed Discord nicknames."""

from __future__ import annotations

COLOR = "\x03"
RESET = "\x0f"

# mIRC color numbers
COLOR_CODES: dict[str, str] = {
    "white": "00",
    "black": "01",
    "dark_blue": "02",
    "dark_green": "03",
    "light_red": "04",
    "dark_red": "05",
    "magenta": "06",
    "orange": "07",
    "yellow": "08",
    "light_green": "09",
    "cyan": "10",
    "light_cyan": "11",
    "light_blue": "12",
    "light_magenta": "13",
    "gray": "14",
    "light_gray": "15",
}

# Palette for nicknames; order is part of the color assignment.
NICK_COLORS: tuple[str, ...] = (
    "light_blue",
    "dark_blue",
    "light_red",
    "dark_red",
    "light_green",
    "dark_green",
    "magenta",
    "light_magenta",
    "orange",
    "yellow",
    "cyan",
    "light_cyan",
)


def color_for(name: str) -> str:
    """Color name for a nickname: (first code point + length) mod palette size."""
    if not name:
        return NICK_COLORS[0]
    return NICK_COLORS[(ord(name[0]) + len(name)) % len(NICK_COLORS)]


def wrap(color: str, text: str) -> str:
    """Wrap text in an IRC color code, resetting formatting afterwards."""
    return f"{COLOR}{COLOR_CODES[color]}{text}{RESET}"


def colorize(name: str) -> str:
    """Nickname wrapped in its assigned color."""
    return wrap(color_for(name), name)
