"""
Response Orchestration Layer.

Turns a chat conversation into a single answer from the completion service
(any LiteLLM-routable provider):

    ModelSelector.select(trigger)          →  ModelTier
                                                 ↓
    ToolCallOrchestrator.run(history)      ←→  HistoryExpander (get_messages)
                                                 ↓
                                              Answer  →  bot layer replies

ContextAssembler renders messages (text, images, text and other files) into
InputTurns on every attempt. Service failures come back as CallResult values
carrying a SelectionError or CompletionError rather than being raised.
"""

from chatrelay.llm.context import ContextAssembler, mention_prefix, strip_prefix
from chatrelay.llm.history import HistoryExpander, merge_history
from chatrelay.llm.models import (
    Answer,
    CallResult,
    CompletionError,
    LLMError,
    ModelTier,
    SelectionError,
)
from chatrelay.llm.orchestrator import ToolCallOrchestrator
from chatrelay.llm.selector import ModelSelector

__all__ = [
    "Answer",
    "CallResult",
    "CompletionError",
    "ContextAssembler",
    "HistoryExpander",
    "LLMError",
    "ModelSelector",
    "ModelTier",
    "SelectionError",
    "ToolCallOrchestrator",
    "mention_prefix",
    "merge_history",
    "strip_prefix",
]
