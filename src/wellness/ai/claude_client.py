"""Claude API wrapper."""
from typing import Optional

import anthropic


class ClaudeClient:
    """Thin synchronous wrapper over the Anthropic SDK."""

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5"):
        self._client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def complete(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1500,
    ) -> str:
        """Send a single user message to Claude and return the response text."""
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = self._client.messages.create(**kwargs)
        return response.content[0].text
