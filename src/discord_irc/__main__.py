"""Bridge entrypoint. Loads config, builds the relay engine, runs both adapters."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from discord_irc import __version__
from discord_irc.adapters.base import AdapterBase
from discord_irc.adapters.disc import DiscordAdapter
from discord_irc.adapters.irc import IRCAdapter
from discord_irc.config import Config, load_config_with_env
from discord_irc.errors import ConfigurationError
from discord_irc.gateway import ChannelMap, RelayEngine


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | {message}"
        ),
    )


def build_bridge(config: Config) -> tuple[RelayEngine, list[AdapterBase]]:
    """Validate config and wire the engine to both adapters.

    Raises ConfigurationError before anything connects.
    """
    config.validate()
    channel_map = ChannelMap.build(config.channel_mapping)
    irc_adapter = IRCAdapter(config, channel_map)
    discord_adapter = DiscordAdapter(config.discord_token)
    engine = RelayEngine(
        channel_map,
        irc=irc_adapter,
        discord=discord_adapter,
        directory=discord_adapter,
        irc_nick_color=config.irc_nick_color,
        command_characters=config.command_characters,
    )
    return engine, [discord_adapter, irc_adapter]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Discord <-> IRC bridge")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entrypoint."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    if not args.config.exists():
        logger.error("Config file not found: {}", args.config)
        sys.exit(1)

    try:
        config = Config(load_config_with_env(args.config))
        engine, adapters = build_bridge(config)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: {}", exc)
        sys.exit(1)
    logger.info("Config loaded from {}", args.config)

    try:
        asyncio.run(_run(engine, adapters))
    except KeyboardInterrupt:
        logger.info("Interrupted")


async def _run(engine: RelayEngine, adapters: list[AdapterBase]) -> None:
    """Start adapters and wait until cancelled."""
    logger.debug("Connecting to IRC and Discord")
    for adapter in adapters:
        logger.debug("Starting {} adapter", adapter.name)
        await adapter.start(engine)
    logger.info("Bridge ready: {} mappings", len(engine.channel_map))

    try:
        while True:
            await asyncio.sleep(60)
    except asyncio.CancelledError:
        logger.info("Bridge shutting down")
        for adapter in adapters:
            logger.debug("Stopping {} adapter", adapter.name)
            await adapter.stop()
        raise


if __name__ == "__main__":
    main()
