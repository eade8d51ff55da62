"""
ChatRelay - Discord bot that relays conversations to a completion service.

The bot answers @mentions and replies to its own messages. It picks a model
tier per conversation, lets the model pull more channel history through a
``get_messages`` tool call, and posts the answer back in Discord-sized chunks.
"""

__version__ = "0.1.0"
