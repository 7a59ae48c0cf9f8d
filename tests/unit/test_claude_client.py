"""Tests for ClaudeClient: wrapper over the Anthropic SDK.

We mock the Anthropic client entirely (no real API calls) and verify:
  - complete() builds the correct payload
  - system_prompt is only included when provided
  - the text of the first content block is returned
"""
from unittest.mock import MagicMock, patch

import pytest

from wellness.ai.claude_client import ClaudeClient


@pytest.fixture
def mock_anthropic_client():
    """Anthropic.Anthropic client mock with messages.create stubbed."""
    client = MagicMock()
    response = MagicMock()
    response.content = [MagicMock(text="balanced")]
    client.messages.create.return_value = response
    return client


@pytest.fixture
def claude(mock_anthropic_client):
    """ClaudeClient with a mock Anthropic backend."""
    with patch("wellness.ai.claude_client.anthropic.Anthropic", return_value=mock_anthropic_client):
        return ClaudeClient(api_key="test-key", model="claude-sonnet-4-5")


class TestClaudeClientInit:
    def test_model_stored(self, claude):
        assert claude.model == "claude-sonnet-4-5"

    def test_default_model_is_sonnet(self):
        with patch("wellness.ai.claude_client.anthropic.Anthropic"):
            c = ClaudeClient(api_key="k")
        assert "sonnet" in c.model.lower()


class TestComplete:
    def test_returns_text(self, claude):
        assert claude.complete("How am I?") == "balanced"

    def test_user_message_included(self, claude, mock_anthropic_client):
        claude.complete("Classify this", max_tokens=10)
        call_kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert call_kwargs["messages"] == [{"role": "user", "content": "Classify this"}]
        assert call_kwargs["max_tokens"] == 10

    def test_system_prompt_included_when_provided(self, claude, mock_anthropic_client):
        claude.complete("q", system_prompt="One word only")
        call_kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert call_kwargs.get("system") == "One word only"

    def test_system_prompt_omitted_when_none(self, claude, mock_anthropic_client):
        claude.complete("q")
        call_kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert "system" not in call_kwargs

    def test_model_passed_through(self, claude, mock_anthropic_client):
        claude.complete("q")
        call_kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert call_kwargs["model"] == "claude-sonnet-4-5"
