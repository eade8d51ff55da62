"""
Chat Gateway Layer.

Adapters between the chat platform and the orchestration layer. The core only
depends on the ChatChannel interface; DiscordChannel is the discord.py-backed
implementation used by the bot.
"""

from chatrelay.gateway.base import ChatChannel
from chatrelay.gateway.discord_channel import DiscordChannel

__all__ = ["ChatChannel", "DiscordChannel"]
