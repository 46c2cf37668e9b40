"""Abstract base class for LLM providers and shared chat/generation glue."""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from mentor.core.errors import BackendError
from mentor.core.schemas import ConversationTurn


def strip_code_fence(raw_text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    return re.sub(r"\n?```\s*$", "", cleaned)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    def __init__(self) -> None:
        self.last_sources: list[dict[str, Any]] = []

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @abstractmethod
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
        """Run one stateless generation and return the raw response text.

        Args:
            prompt: User content for the request.
            model: Override the provider's default model. None uses default.
            system: System instruction for this call.
            temperature: Sampling temperature, None for the provider default.
            json_output: Ask the backend for a JSON response where supported.
            web_search: Enable web grounding where supported. Sources are
                exposed through ``last_sources``.
        """

    @abstractmethod
    def converse(
        self,
        system: str,
        messages: list[ConversationTurn],
        model: str | None = None,
    ) -> str:
        """Send a full conversation (ending with a user turn) and return the reply."""


def generate_once(
    provider: LLMProvider,
    prompt: str,
    *,
    system: str,
    model: str | None = None,
    temperature: float | None = None,
    json_output: bool = False,
    web_search: bool = False,
) -> str:
    """Call ``provider.complete``, converting any failure into BackendError."""
    try:
        return provider.complete(
            prompt,
            model,
            system=system,
            temperature=temperature,
            json_output=json_output,
            web_search=web_search,
        ) or ""
    except Exception as e:
        msg = f"{provider.provider_id} generation failed: {e}"
        raise BackendError(msg) from e


class ChatHandle:
    """Stateful chat over a stateless provider.

    Keeps the running message list; a failed ``send`` leaves it unchanged.
    A blank reply is recorded (and returned) as ``empty_reply`` when one is
    given, so the history never carries an empty assistant message.
    """

    def __init__(
        self,
        provider: LLMProvider,
        system: str,
        prior_turns: Iterable[ConversationTurn] = (),
        model: str | None = None,
        empty_reply: str | None = None,
    ) -> None:
        self._provider = provider
        self._system = system
        self._model = model
        self._empty_reply = empty_reply
        self._messages: list[ConversationTurn] = list(prior_turns)

    @property
    def messages(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._messages)

    def send(self, text: str) -> str:
        """Send one user message and return the reply text.

        Raises:
            BackendError: On any provider failure.
        """
        outgoing = [*self._messages, ConversationTurn(speaker="user", text=text)]
        try:
            reply = self._provider.converse(self._system, outgoing, self._model) or ""
        except Exception as e:
            msg = f"{self._provider.provider_id} chat failed: {e}"
            raise BackendError(msg) from e
        if not reply.strip() and self._empty_reply is not None:
            reply = self._empty_reply
        self._messages = [*outgoing, ConversationTurn(speaker="assistant", text=reply)]
        return reply
