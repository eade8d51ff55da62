"""
Unit tests for ModelSelector.

Tests cover:
- System prompt lists every tier
- Structured output request (response_format=ModelChoice)
- Valid tier → success value
- Transport error, empty content, invalid tier → SelectionError value
"""

from unittest.mock import MagicMock, patch

import pytest

from chatrelay.config.settings import LLMSettings
from chatrelay.llm.models import (
    InputTurn,
    ModelChoice,
    ModelTier,
    Role,
    SelectionError,
    TextPart,
)
from chatrelay.llm.selector import ModelSelector

TEMPLATE = "Select the best model for the following conversation from {models}."


def _make_parse_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    choice.message.tool_calls = None
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def settings():
    return LLMSettings(selector_model="gpt-5-nano", api_key="test-api-key")


@pytest.fixture
def selector(settings):
    return ModelSelector(settings=settings, system_template=TEMPLATE)


@pytest.fixture
def turn():
    return InputTurn(role=Role.USER, content=[TextPart(text="from: alice\ntime: now\nhi")])


class TestSelectorPrompt:
    def test_lists_every_tier(self, selector):
        prompt = selector._build_system_prompt()
        assert prompt == (
            "Select the best model for the following conversation from "
            "gpt-5-nano, gpt-5-mini, gpt-5.2, gpt-5.1-codex."
        )

    @pytest.mark.asyncio
    async def test_requests_structured_output(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response('{"model": "gpt-5-nano"}'),
        ) as mock_call:
            await selector.select(turn)

        kwargs = mock_call.call_args.kwargs
        assert kwargs["model"] == "gpt-5-nano"
        assert kwargs["response_format"] is ModelChoice
        assert kwargs["api_key"] == "test-api-key"
        assert kwargs["messages"][0]["role"] == "system"
        assert kwargs["messages"][1] == turn.to_litellm()
        assert "tools" not in kwargs

    @pytest.mark.asyncio
    async def test_omits_api_key_when_unset(self, turn):
        selector = ModelSelector(settings=LLMSettings(api_key=""), system_template=TEMPLATE)
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response('{"model": "gpt-5-nano"}'),
        ) as mock_call:
            await selector.select(turn)

        assert "api_key" not in mock_call.call_args.kwargs


class TestSelectorResults:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", list(ModelTier))
    async def test_valid_tier(self, selector, turn, tier):
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response(f'{{"model": "{tier.value}"}}'),
        ):
            result = await selector.select(turn)

        assert result.ok
        assert result.value is tier

    @pytest.mark.asyncio
    async def test_api_failure_is_selection_error_value(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            side_effect=Exception("API rate limit exceeded"),
        ):
            result = await selector.select(turn)

        assert not result.ok
        assert isinstance(result.error, SelectionError)
        assert str(result.error) == "API rate limit exceeded"
        assert result.value is None

    @pytest.mark.asyncio
    async def test_unknown_tier_is_selection_error(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response('{"model": "gpt-4o"}'),
        ):
            result = await selector.select(turn)

        assert isinstance(result.error, SelectionError)
        assert "gpt-4o" in str(result.error)

    @pytest.mark.asyncio
    async def test_malformed_json_is_selection_error(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response("gpt-5-mini"),
        ):
            result = await selector.select(turn)

        assert isinstance(result.error, SelectionError)

    @pytest.mark.asyncio
    async def test_missing_content_is_selection_error(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            return_value=_make_parse_response(None),
        ):
            result = await selector.select(turn)

        assert isinstance(result.error, SelectionError)

    @pytest.mark.asyncio
    async def test_called_once_no_retry(self, selector, turn):
        with patch(
            "chatrelay.llm.selector.acompletion",
            side_effect=Exception("boom"),
        ) as mock_call:
            await selector.select(turn)

        assert mock_call.call_count == 1
