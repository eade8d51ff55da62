"""
ChatRelay CLI entry point.

Provides command-line interface for running the bot and inspecting its
configuration.
"""

import argparse
import sys
from pathlib import Path

from chatrelay import __version__
from chatrelay.config.logging import get_logger, setup_logging
from chatrelay.config.settings import load_settings
from chatrelay.llm.models import ModelTier


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="chatrelay",
        description="Discord bot that relays conversations to a completion service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ChatRelay {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("run", help="Run the Discord bot")
    subparsers.add_parser("config", help="Show current configuration")

    return parser


def cmd_config(settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== ChatRelay Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"\nBot Name: {settings.bot.name}")
    logger.info(f"Bot Token: {'Set' if settings.bot.token else 'Not set'}")
    logger.info(f"Allowed Channels: {settings.bot.allowed_channel_ids or 'all'}")
    logger.info(f"History Seed Size: {settings.bot.history_seed_size}")
    logger.info(f"Typing Interval: {settings.bot.typing_interval}s")
    logger.info(f"Reply Chunk Size: {settings.bot.reply_chunk_size}")
    logger.info(f"Max Attachments: {settings.bot.max_attachments}")
    logger.info(f"\nSelector Model: {settings.llm.selector_model}")
    logger.info(f"Model Tiers: {', '.join(tier.value for tier in ModelTier)}")
    logger.info(f"Max Attempts: {settings.llm.max_attempts}")
    logger.info(f"LLM API Key: {'Set' if settings.llm.api_key else 'Not set (provider env var)'}")

    return 0


def cmd_run(settings) -> int:
    """Start the Discord bot."""
    logger = get_logger(__name__)

    if not settings.bot.token:
        logger.error(
            "Discord bot token not set. Add BOT__TOKEN=<your-token> to your .env file."
        )
        return 1

    from chatrelay.bot import ChatRelayBot

    bot = ChatRelayBot(settings)
    logger.info(f"Starting {settings.bot.name}...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(settings.bot.token, log_handler=None)
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "run":
        return cmd_run(settings)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
