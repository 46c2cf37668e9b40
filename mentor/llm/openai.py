"""OpenAI LLM provider."""

import logging
import os
from typing import Any

from mentor.core.schemas import ConversationTurn
from mentor.llm.base import LLMProvider

logger = logging.getLogger(__name__)


def to_chat_messages(system: str, turns: list[ConversationTurn]) -> list[dict[str, str]]:
    """Build an OpenAI-style message list with the system prompt first."""
    messages = [{"role": "system", "content": system}]
    messages.extend({"role": t.speaker, "content": t.text} for t in turns)
    return messages


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

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
        turns = [ConversationTurn(speaker="user", text=prompt)]
        return self._create(to_chat_messages(system, turns), model, temperature, json_output)

    def converse(
        self,
        system: str,
        messages: list[ConversationTurn],
        model: str | None = None,
    ) -> str:
        return self._create(to_chat_messages(system, messages), model, None, False)

    def _client(self) -> Any:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for this provider. "
                "Install with: pip install 'ua-tech-mentor[openai]'"
            )
            raise ImportError(msg) from None

        return openai.OpenAI(api_key=api_key)

    def _create(
        self,
        messages: list[dict[str, str]],
        model: str | None,
        temperature: float | None,
        json_output: bool,
    ) -> str:
        client = self._client()
        use_model = model or self.default_model

        kwargs: dict[str, Any] = {"model": use_model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        logger.info("Sending %d message(s) to OpenAI API (%s)...", len(messages), use_model)
        response = client.chat.completions.create(**kwargs)

        return response.choices[0].message.content  # type: ignore[no-any-return]
