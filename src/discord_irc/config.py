"""Configuration: YAML file + .env / environment overlay."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from discord_irc.errors import ConfigurationError

REQUIRED_FIELDS = ("server", "nickname", "channel_mapping", "discord_token")

# Environment variables overriding top-level keys
ENV_OVERRIDES = {
    "DISCORD_TOKEN": "discord_token",
    "IRC_SERVER": "server",
    "IRC_NICKNAME": "nickname",
}


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path) -> dict[str, Any]:
    """Load config from YAML file. Use SafeLoader. Returns raw dict."""
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise ConfigurationError(f"Invalid YAML in {path}", original_error=exc) from exc
    if not isinstance(data, dict):
        logger.warning("Config file {} has invalid structure (expected dict)", path)
        return {}
    return data


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Top-level config values taken from the environment."""
    environ = dict(os.environ) if environ is None else environ
    return {key: environ[var] for var, key in ENV_OVERRIDES.items() if environ.get(var)}


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load config from YAML and overlay env-derived values.

    Loads .env via python-dotenv when present, so secrets such as
    DISCORD_TOKEN can stay out of the YAML file.
    """
    from dotenv import load_dotenv

    load_dotenv()
    return _deep_update(load_config(path), env_overrides())


class Config:
    """Config accessor with attribute-style access for known keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    def validate(self) -> Config:
        """Raise ConfigurationError for missing required fields or bad values."""
        for field in REQUIRED_FIELDS:
            if not self._data.get(field):
                raise ConfigurationError(f"Missing configuration field {field}", code=field)
        chars = self._data.get("command_characters") or []
        if not isinstance(chars, list) or not all(isinstance(c, str) and len(c) == 1 for c in chars):
            raise ConfigurationError(
                "command_characters must be a list of single characters",
                code="command_characters",
            )
        commands = self._data.get("auto_send_commands") or []
        if not isinstance(commands, list) or not all(isinstance(c, list) and c for c in commands):
            raise ConfigurationError(
                "auto_send_commands must be a list of non-empty lists",
                code="auto_send_commands",
            )
        if not isinstance(self._data.get("irc_options") or {}, dict):
            raise ConfigurationError("irc_options must be a mapping", code="irc_options")
        return self

    @property
    def server(self) -> str:
        return str(self._data.get("server", ""))

    @property
    def nickname(self) -> str:
        return str(self._data.get("nickname", ""))

    @property
    def discord_token(self) -> str:
        return str(self._data.get("discord_token", ""))

    @property
    def channel_mapping(self) -> dict[str, Any]:
        """Raw '#discord' -> '#irc [key]' mapping."""
        m = self._data.get("channel_mapping")
        return m if isinstance(m, dict) else {}

    @property
    def irc_nick_color(self) -> bool:
        """Color relayed Discord nicknames on IRC."""
        return self._data.get("irc_nick_color") is not False

    @property
    def command_characters(self) -> list[str]:
        """Prefixes marking a message as a bot command (e.g. '!')."""
        val = self._data.get("command_characters")
        if isinstance(val, list):
            return [str(c) for c in val]
        return []

    @property
    def auto_send_commands(self) -> list[list[str]]:
        """Raw IRC commands sent after registration (e.g. ['PRIVMSG', 'NickServ', 'IDENTIFY pw'])."""
        val = self._data.get("auto_send_commands")
        if isinstance(val, list):
            return [[str(p) for p in c] for c in val if isinstance(c, list)]
        return []

    @property
    def irc_options(self) -> dict[str, Any]:
        val = self._data.get("irc_options")
        return val if isinstance(val, dict) else {}

    @property
    def irc_port(self) -> int:
        return int(self.irc_options.get("port", 6667))

    @property
    def irc_tls(self) -> bool:
        return bool(self.irc_options.get("tls", False))

    @property
    def irc_tls_verify(self) -> bool:
        """Verify IRC TLS certificates. Set false for self-signed dev servers."""
        return bool(self.irc_options.get("tls_verify", True))

    @property
    def irc_password(self) -> str | None:
        """Server password (PASS)."""
        val = self.irc_options.get("password")
        return str(val) if val else None

    @property
    def irc_username(self) -> str:
        return str(self.irc_options.get("username") or self.nickname)

    @property
    def irc_realname(self) -> str:
        return str(self.irc_options.get("realname") or self.nickname)

    @property
    def irc_flood_protection_delay(self) -> float:
        """Seconds between outbound IRC lines."""
        return float(self.irc_options.get("flood_protection_delay", 0.5))

    @property
    def irc_retry_count(self) -> int:
        """Connection attempts before giving up."""
        return int(self.irc_options.get("retry_count", 10))
