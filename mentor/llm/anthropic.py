"""Anthropic Claude LLM provider."""

import logging
import os
from typing import Any

from mentor.core.schemas import ConversationTurn
from mentor.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_MAX_TOKENS = 4096


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
        json_output: bool = False,
        web_search: bool = False,
    ) -> str:
        messages = [{"role": "user", "content": prompt}]
        return self._create(system, messages, model, temperature)

    def converse(
        self,
        system: str,
        messages: list[ConversationTurn],
        model: str | None = None,
    ) -> str:
        payload = [{"role": t.speaker, "content": t.text} for t in messages]
        return self._create(system, payload, model, None)

    def _create(
        self,
        system: str,
        messages: list[dict[str, str]],
        model: str | None,
        temperature: float | None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for this provider. "
                "Install with: pip install 'ua-tech-mentor[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model

        kwargs: dict[str, Any] = {
            "model": use_model,
            "max_tokens": _MAX_TOKENS,
            "system": system,
            "messages": messages,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.info("Sending %d message(s) to Anthropic API (%s)...", len(messages), use_model)
        message = client.messages.create(**kwargs)

        return message.content[0].text  # type: ignore[union-attr]
