"""
The ``get_messages`` tool: declaration sent to the model and parsing of the
tool-call items it sends back.
"""

from __future__ import annotations

from typing import Any

from chatrelay.llm.models import GetMessagesArgs, ToolRequest

GET_MESSAGES = "get_messages"
MIN_FETCH = 1
MAX_FETCH = 20

# LiteLLM / OpenAI chat-completions function format
GET_MESSAGES_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": GET_MESSAGES,
        "description": "Fetch more message history from the current channel.",
        "parameters": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": f"The number of messages to fetch, between {MIN_FETCH} and {MAX_FETCH}.",
                    "minimum": MIN_FETCH,
                    "maximum": MAX_FETCH,
                },
            },
            "additionalProperties": False,
            "required": ["limit"],
        },
        "strict": True,
    },
}


def extract_tool_requests(message: Any) -> list[ToolRequest]:
    """
    Collect every ``get_messages`` call from an assistant message.

    Calls to any other function name are ignored.

    Raises:
        pydantic.ValidationError: If a call's arguments are not valid JSON
            or ``limit`` is missing or outside [1, 20]
    """
    requests: list[ToolRequest] = []
    for tool_call in getattr(message, "tool_calls", None) or []:
        if tool_call.function.name != GET_MESSAGES:
            continue
        requests.append(
            ToolRequest(
                id=tool_call.id or "",
                name=tool_call.function.name,
                arguments=GetMessagesArgs.model_validate_json(tool_call.function.arguments or ""),
            )
        )
    return requests
