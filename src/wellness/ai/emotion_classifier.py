"""
Emotional state classifiers: (LifeScoreSample, MetricSample) → state label.

The rule engine is always available. The Claude-backed classifier asks for
a one-word answer and falls back to the rules when the call fails, the
reply carries no text, or the answer is not a known state.
"""
import logging
from typing import Optional

import anthropic

from wellness.ai.claude_client import ClaudeClient
from wellness.analysis.emotion import EMOTIONAL_STATES, Classifier, classify_by_rules
from wellness.analysis.samples import LifeScoreSample, MetricSample
from wellness.config import Settings
from wellness.prompts.emotion import build_emotion_prompt, build_emotion_system_prompt

logger = logging.getLogger(__name__)


def parse_state(text: str) -> Optional[str]:
    """First known state word in the reply, or None."""
    for word in text.lower().replace(".", " ").replace(",", " ").split():
        if word in EMOTIONAL_STATES:
            return word
    return None


class ClaudeEmotionClassifier:
    """Delegates classification to Claude with a rule-engine fallback."""

    def __init__(self, claude: ClaudeClient, max_tokens: int = 10):
        self.claude = claude
        self.max_tokens = max_tokens

    def __call__(self, score: LifeScoreSample, metrics: MetricSample) -> str:
        try:
            reply = self.claude.complete(
                build_emotion_prompt(score, metrics),
                system_prompt=build_emotion_system_prompt(),
                max_tokens=self.max_tokens,
            )
        except (anthropic.APIError, IndexError, AttributeError) as exc:
            # IndexError/AttributeError: reply without a text content block
            logger.warning("Claude classification failed, using rules: %s", exc)
            return classify_by_rules(score, metrics)

        state = parse_state(reply)
        if state is None:
            logger.warning("Unrecognised state from Claude: %r", reply)
            return classify_by_rules(score, metrics)
        return state


def build_classifier(settings: Settings) -> Classifier:
    """Classifier selected by settings; Claude needs an API key to be used."""
    if settings.emotion_classifier == "claude":
        if settings.anthropic_api_key:
            claude = ClaudeClient(api_key=settings.anthropic_api_key, model=settings.claude_model)
            return ClaudeEmotionClassifier(claude)
        logger.info("ANTHROPIC_API_KEY not set, using rule-based emotion classifier.")
    return classify_by_rules
