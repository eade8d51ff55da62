"""
ToolCallOrchestrator: the bounded attempt loop behind every reply.

    Attempting(0) ──get_messages──▶ Expanding ──▶ Attempting(1) ──get_messages──▶ ...
         │                                            │
         └──text──▶ Done                              └──text──▶ Done

Each attempt rebuilds the input turns from the current history, sends them
after the system preamble, and inspects the response:

- no ``get_messages`` call in the response → its text is the answer
- one or more ``get_messages`` calls → HistoryExpander fetches older
  messages, and the next attempt runs on the merged history

The last attempt is sent without any tool declaration, so the model has to
answer from whatever history has accumulated. Completion-service failures are
returned as CompletionError values and end the loop immediately; nothing is
retried at the same attempt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from litellm import acompletion
from pydantic import ValidationError

from chatrelay.config.logging import get_logger
from chatrelay.config.settings import LLMSettings
from chatrelay.llm.context import ContextAssembler
from chatrelay.llm.history import HistoryExpander
from chatrelay.llm.models import (
    Answer,
    CallResult,
    CompletionError,
    InputTurn,
    Message,
    ModelTier,
)
from chatrelay.llm.tools import GET_MESSAGES_TOOL, extract_tool_requests

if TYPE_CHECKING:
    from chatrelay.gateway.base import ChatChannel

logger = get_logger(__name__)

DIRECT_MESSAGE = "Direct Message"


class ToolCallOrchestrator:
    """
    Drives completion attempts until the model answers or the budget runs out.

    Stateless between calls: the history, attempt counter and assembler of a
    run belong to that run alone, so concurrent cycles never share state.

    Args:
        settings: LLM configuration (api key, token limit, attempt budget)
        system_template: Preamble with {guild_name} and {channel_name} placeholders
    """

    def __init__(self, settings: LLMSettings, system_template: str):
        self._settings = settings
        self._system_template = system_template
        self._max_attempts = settings.max_attempts

    def _build_system_prompt(self, channel: ChatChannel) -> str:
        return (
            self._system_template
            .replace("{guild_name}", channel.guild_name or DIRECT_MESSAGE)
            .replace("{channel_name}", channel.channel_name or DIRECT_MESSAGE)
        )

    def offers_tools(self, attempt: int) -> bool:
        """The final attempt never declares tools."""
        return attempt < self._max_attempts - 1

    async def _complete(
        self,
        model: ModelTier,
        system_prompt: str,
        turns: list[InputTurn],
        attempt: int,
    ) -> CallResult[Any]:
        call_kwargs: dict[str, Any] = {
            "model": model.value,
            "messages": [
                {"role": "system", "content": system_prompt},
                *(turn.to_litellm() for turn in turns),
            ],
        }
        if self.offers_tools(attempt):
            call_kwargs["tools"] = [GET_MESSAGES_TOOL]
        if self._settings.api_key:
            call_kwargs["api_key"] = self._settings.api_key
        if self._settings.max_tokens:
            call_kwargs["max_tokens"] = self._settings.max_tokens

        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            logger.error(f"Error generating response (attempt {attempt}): {e}")
            return CallResult.failure(CompletionError(str(e), cause=e))
        return CallResult.success(response)

    async def run(
        self,
        channel: ChatChannel,
        assembler: ContextAssembler,
        history: list[Message],
        model: ModelTier,
    ) -> CallResult[Answer]:
        """
        Run the attempt loop for one response cycle.

        Args:
            channel: Channel the conversation lives in
            assembler: The cycle's ContextAssembler
            history: Seed ConversationHistory, sorted ascending
            model: Tier chosen by the ModelSelector

        Returns:
            CallResult holding the Answer, or a CompletionError
        """
        expander = HistoryExpander(channel)
        system_prompt = self._build_system_prompt(channel)

        for attempt in range(self._max_attempts):
            turns = await assembler.build_turns(history)
            logger.debug(
                f"Attempt {attempt} with {model.value}: {len(turns)} turn(s), "
                f"tools={'on' if self.offers_tools(attempt) else 'off'}"
            )

            result = await self._complete(model, system_prompt, turns, attempt)
            if not result.ok:
                return CallResult.failure(result.error)

            message = result.value.choices[0].message
            try:
                requests = extract_tool_requests(message)
            except ValidationError as e:
                logger.error(f"Malformed get_messages arguments: {e}")
                return CallResult.failure(
                    CompletionError("The model sent malformed get_messages arguments.", cause=e)
                )

            if not requests:
                answer = Answer(
                    text=message.content or "",
                    model=model.value,
                    attempts=attempt,
                    history=history,
                )
                logger.info(
                    f"Answered with {model.value} on attempt {attempt} "
                    f"({len(history)} message(s) of history, {len(answer.text)} chars)"
                )
                logger.debug(
                    "History: "
                    + "; ".join(f"{m.author_name}: {m.content!r}" for m in history)
                    + f"\nResponse: {answer.text!r}"
                )
                return CallResult.success(answer)

            if not self.offers_tools(attempt):
                logger.warning(f"Attempt {attempt}: get_messages requested with no tool offered")
                break

            limits = [r.arguments.limit for r in requests]
            logger.info(f"Attempt {attempt}: model requested get_messages {limits}")
            history = await expander.expand(history, limits)

        return CallResult.failure(
            CompletionError(f"No answer after {self._max_attempts} attempts.")
        )
