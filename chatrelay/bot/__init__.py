"""
Discord Bot Layer.

Handles message intake, typing indication and reply delivery around the
response-orchestration core.
"""

from chatrelay.bot.client import ChatRelayBot

__all__ = ["ChatRelayBot"]
