"""Google Gemini LLM provider (google-genai SDK)."""

import logging
import os
from typing import Any

from mentor.core.schemas import ConversationTurn
from mentor.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK).

    The only provider with web grounding: sources of the last grounded call
    are kept in ``last_sources``.
    """

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

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
        genai, genai_types = _import_sdk()
        client = genai.Client(api_key=_api_key())
        use_model = model or self.default_model

        config_kwargs: dict[str, Any] = {"system_instruction": system}
        if temperature is not None:
            config_kwargs["temperature"] = temperature
        if web_search:
            config_kwargs["tools"] = [genai_types.Tool(google_search=genai_types.GoogleSearch())]
        elif json_output:
            # Grounded calls cannot force a JSON mime type; the prompt asks for JSON instead.
            config_kwargs["response_mime_type"] = "application/json"

        logger.info("Sending to Gemini API (%s)...", use_model)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(**config_kwargs),
        )

        self.last_sources = _grounding_sources(response) if web_search else []
        return response.text  # type: ignore[no-any-return]

    def converse(
        self,
        system: str,
        messages: list[ConversationTurn],
        model: str | None = None,
    ) -> str:
        genai, genai_types = _import_sdk()
        client = genai.Client(api_key=_api_key())
        use_model = model or self.default_model

        contents = [
            genai_types.Content(
                role="model" if t.speaker == "assistant" else "user",
                parts=[genai_types.Part(text=t.text)],
            )
            for t in messages
        ]

        logger.info("Sending %d message(s) to Gemini API (%s)...", len(contents), use_model)
        response = client.models.generate_content(
            model=use_model,
            contents=contents,
            config=genai_types.GenerateContentConfig(system_instruction=system),
        )

        return response.text  # type: ignore[no-any-return]


def _api_key() -> str:
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        msg = "GOOGLE_API_KEY environment variable is required"
        raise ValueError(msg)
    return api_key


def _import_sdk() -> tuple[Any, Any]:
    try:
        from google import genai
        from google.genai import types as genai_types
    except ImportError:
        msg = (
            "google-genai is required for this provider. "
            "Install with: pip install 'ua-tech-mentor[gemini]'"
        )
        raise ImportError(msg) from None
    return genai, genai_types


def _grounding_sources(response: Any) -> list[dict[str, Any]]:
    """Extract ``{"uri", "title"}`` pairs from grounding metadata, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    sources: list[dict[str, Any]] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        sources.append({"uri": getattr(web, "uri", ""), "title": getattr(web, "title", "")})
    return sources
