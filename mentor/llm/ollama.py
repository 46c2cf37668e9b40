"""Ollama local LLM provider (OpenAI-compatible API)."""

from typing import Any

from mentor.llm.openai import OpenAIProvider

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(OpenAIProvider):
    """LLM provider using a local Ollama instance via OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    def _client(self) -> Any:
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for Ollama (OpenAI-compatible API). "
                "Install with: pip install 'ua-tech-mentor[openai]'"
            )
            raise ImportError(msg) from None

        return openai.OpenAI(base_url=_OLLAMA_BASE_URL, api_key="ollama")
