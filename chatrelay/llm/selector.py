"""
ModelSelector: one structured classification call that picks a ModelTier.

The triggering message is sent to a small model together with the list of
tiers, and the answer is constrained to the ModelChoice JSON schema via
LiteLLM's ``response_format``. Anything other than a valid tier is a
SelectionError. The call is never retried and there is no silent default.
"""

from __future__ import annotations

from typing import Any

from litellm import acompletion
from pydantic import ValidationError

from chatrelay.config.logging import get_logger
from chatrelay.config.settings import LLMSettings
from chatrelay.llm.models import (
    CallResult,
    InputTurn,
    ModelChoice,
    ModelTier,
    SelectionError,
)

logger = get_logger(__name__)


class ModelSelector:
    """
    Picks the completion model tier for a response cycle.

    Args:
        settings: LLM configuration (selector model, api key, token limit)
        system_template: Prompt template with a {models} placeholder
    """

    def __init__(self, settings: LLMSettings, system_template: str):
        self._settings = settings
        self._system_template = system_template

    def _build_system_prompt(self) -> str:
        return self._system_template.replace(
            "{models}", ", ".join(tier.value for tier in ModelTier)
        )

    async def select(self, turn: InputTurn) -> CallResult[ModelTier]:
        """
        Classify the conversation rendered in ``turn``.

        Returns:
            CallResult holding the chosen ModelTier, or a SelectionError whose
            message is meant to be shown to the user as-is.
        """
        call_kwargs: dict[str, Any] = {
            "model": self._settings.selector_model,
            "messages": [
                {"role": "system", "content": self._build_system_prompt()},
                turn.to_litellm(),
            ],
            "response_format": ModelChoice,
        }
        if self._settings.api_key:
            call_kwargs["api_key"] = self._settings.api_key
        if self._settings.max_tokens:
            call_kwargs["max_tokens"] = self._settings.max_tokens

        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            logger.error(f"Error selecting model: {e}")
            return CallResult.failure(SelectionError(str(e), cause=e))

        raw = response.choices[0].message.content
        if not raw:
            logger.error("Model selection returned no content")
            return CallResult.failure(SelectionError("Model selection returned no content."))

        try:
            choice = ModelChoice.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Model selection returned an invalid tier: {raw!r}")
            return CallResult.failure(
                SelectionError(f"Model selection returned an invalid tier: {raw}", cause=e)
            )

        logger.debug(f"Selected model tier {choice.model.value}")
        return CallResult.success(choice.model)
