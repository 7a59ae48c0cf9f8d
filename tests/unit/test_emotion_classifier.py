"""Tests for the rule-based and Claude-backed emotional state classifiers."""
from datetime import date
from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from conftest import NOW, make_metric
from wellness.ai.emotion_classifier import (
    ClaudeEmotionClassifier,
    build_classifier,
    parse_state,
)
from wellness.analysis.emotion import analyze_emotional_state, classify_by_rules
from wellness.analysis.samples import LifeScoreSample
from wellness.config import Settings

SCORE = LifeScoreSample(date(2025, 3, 14), stress=9, energy=5, sleep=5, overall=5)


@pytest.fixture
def claude():
    return MagicMock()


class TestParseState:
    def test_bare_word(self):
        assert parse_state("tired") == "tired"

    def test_punctuation_and_case(self):
        assert parse_state("Motivated.") == "motivated"

    def test_unknown(self):
        assert parse_state("ecstatic") is None


class TestClaudeEmotionClassifier:
    def test_uses_claude_answer(self, claude):
        claude.complete.return_value = "energetic"
        assert ClaudeEmotionClassifier(claude)(SCORE, make_metric()) == "energetic"

    def test_sends_prompt_and_system_prompt(self, claude):
        claude.complete.return_value = "balanced"
        ClaudeEmotionClassifier(claude, max_tokens=5)(SCORE, make_metric())
        args, kwargs = claude.complete.call_args
        assert "Stress | 9.0" in args[0]
        assert kwargs["system_prompt"]
        assert kwargs["max_tokens"] == 5

    def test_unknown_answer_falls_back_to_rules(self, claude):
        claude.complete.return_value = "I think they feel fine"
        assert ClaudeEmotionClassifier(claude)(SCORE, make_metric()) == "stressed"

    def test_api_error_falls_back_to_rules(self, claude):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        claude.complete.side_effect = anthropic.APIConnectionError(request=request)
        assert ClaudeEmotionClassifier(claude)(SCORE, make_metric()) == "stressed"

    @pytest.mark.parametrize("error", [
        IndexError("list index out of range"),
        AttributeError("'ToolUseBlock' object has no attribute 'text'"),
    ])
    def test_reply_without_text_falls_back_to_rules(self, claude, error):
        claude.complete.side_effect = error
        assert ClaudeEmotionClassifier(claude)(SCORE, make_metric()) == "stressed"

    def test_analysis_survives_reply_without_text(self, claude):
        claude.complete.side_effect = IndexError("list index out of range")
        result = analyze_emotional_state([], None, NOW, classify=ClaudeEmotionClassifier(claude))
        assert result.current_state == "balanced"


class TestBuildClassifier:
    def test_rules_by_default(self):
        assert build_classifier(Settings(_env_file=None)) is classify_by_rules

    def test_claude_without_key_uses_rules(self):
        settings = Settings(_env_file=None, emotion_classifier="claude", anthropic_api_key="")
        assert build_classifier(settings) is classify_by_rules

    def test_claude_with_key(self):
        settings = Settings(_env_file=None, emotion_classifier="claude", anthropic_api_key="k")
        with patch("wellness.ai.claude_client.anthropic.Anthropic"):
            classifier = build_classifier(settings)
        assert isinstance(classifier, ClaudeEmotionClassifier)
        assert classifier.claude.model == settings.claude_model
