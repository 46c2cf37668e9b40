"""Tests for LLM provider adapter pattern, registry, and chat glue."""

from unittest.mock import MagicMock, patch

import pytest

from mentor.core.errors import BackendError
from mentor.core.schemas import ConversationTurn
from mentor.llm import ChatHandle, available_providers, generate_once, get_provider
from mentor.llm.base import LLMProvider, strip_code_fence
from tests.conftest import FakeProvider


def _mock_gemini_sdk(text: str = "ok") -> tuple[MagicMock, MagicMock, MagicMock]:
    """A fake ``google.genai`` package; returns (google, genai, types)."""
    mock_types = MagicMock()
    mock_genai = MagicMock()
    mock_genai.types = mock_types
    mock_genai.Client.return_value.models.generate_content.return_value.text = text
    mock_google = MagicMock()
    mock_google.genai = mock_genai
    return mock_google, mock_genai, mock_types


def _gemini_modules(mock_google: MagicMock, mock_genai: MagicMock, mock_types: MagicMock) -> dict:
    return {"google": mock_google, "google.genai": mock_genai, "google.genai.types": mock_types}


# ---------------------------------------------------------------------------
# Registry tests
# ---------------------------------------------------------------------------
class TestProviderRegistry:
    @pytest.mark.parametrize("name", ["anthropic", "openai", "gemini", "ollama"])
    def test_get_provider(self, name: str) -> None:
        provider = get_provider(name)
        assert isinstance(provider, LLMProvider)
        assert provider.provider_id == name
        assert provider.last_sources == []

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider 'nope'"):
            get_provider("nope")

    def test_available_providers_sorted(self) -> None:
        assert available_providers() == ["anthropic", "gemini", "ollama", "openai"]


# ---------------------------------------------------------------------------
# Anthropic provider tests
# ---------------------------------------------------------------------------
class TestAnthropicProvider:
    def test_provider_id(self) -> None:
        provider = get_provider("anthropic")
        assert provider.default_model == "claude-sonnet-4-20250514"
        assert provider.env_var == "ANTHROPIC_API_KEY"

    def test_missing_api_key(self) -> None:
        provider = get_provider("anthropic")
        with (
            patch.dict("os.environ", {}, clear=True),
            pytest.raises(ValueError, match="ANTHROPIC_API_KEY"),
        ):
            provider.complete("code", system="s")

    def test_missing_sdk(self) -> None:
        provider = get_provider("anthropic")
        with (
            patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}),
            patch.dict("sys.modules", {"anthropic": None}),
            pytest.raises(ImportError, match="anthropic is required"),
        ):
            provider.complete("code", system="s")

    def test_complete_kwargs(self) -> None:
        provider = get_provider("anthropic")
        mock_anthropic = MagicMock()
        mock_client = mock_anthropic.Anthropic.return_value
        mock_client.messages.create.return_value.content = [MagicMock(text="analysis")]

        with (
            patch.dict("os.environ", {"ANTHROPIC_API_KEY": "key"}),
            patch.dict("sys.modules", {"anthropic": mock_anthropic}),
        ):
            result = provider.complete("code", system="custom system", temperature=0.4)

        assert result == "analysis"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "custom system"
        assert kwargs["temperature"] == 0.4
        assert kwargs["messages"] == [{"role": "user", "content": "code"}]

    def test_converse_roles(self) -> None:
        provider = get_provider("anthropic")
        mock_anthropic = MagicMock()
        mock_client = mock_anthropic.Anthropic.return_value
        mock_client.messages.create.return_value.content = [MagicMock(text="next")]
        turns = [
            ConversationTurn(speaker="user", text="start"),
            ConversationTurn(speaker="assistant", text="Q1"),
            ConversationTurn(speaker="user", text="A1"),
        ]

        with (
            patch.dict("os.environ", {"ANTHROPIC_API_KEY": "key"}),
            patch.dict("sys.modules", {"anthropic": mock_anthropic}),
        ):
            provider.converse("interviewer", turns)

        kwargs = mock_client.messages.create.call_args.kwargs
        assert [m["role"] for m in kwargs["messages"]] == ["user", "assistant", "user"]
        assert "temperature" not in kwargs


# ---------------------------------------------------------------------------
# OpenAI / Ollama provider tests
# ---------------------------------------------------------------------------
class TestOpenAIProvider:
    def test_provider_id(self) -> None:
        provider = get_provider("openai")
        assert provider.default_model == "gpt-4o-mini"
        assert provider.env_var == "OPENAI_API_KEY"

    def test_missing_api_key(self) -> None:
        provider = get_provider("openai")
        with (
            patch.dict("os.environ", {}, clear=True),
            pytest.raises(ValueError, match="OPENAI_API_KEY"),
        ):
            provider.complete("code", system="s")

    def test_missing_sdk(self) -> None:
        provider = get_provider("openai")
        with (
            patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}),
            patch.dict("sys.modules", {"openai": None}),
            pytest.raises(ImportError, match="openai is required"),
        ):
            provider.complete("code", system="s")

    def test_system_first_and_json_format(self) -> None:
        provider = get_provider("openai")
        mock_openai = MagicMock()
        create = mock_openai.OpenAI.return_value.chat.completions.create
        create.return_value.choices[0].message.content = "{}"

        with (
            patch.dict("os.environ", {"OPENAI_API_KEY": "key"}),
            patch.dict("sys.modules", {"openai": mock_openai}),
        ):
            provider.complete("find jobs", system="custom system", json_output=True)

        kwargs = create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "custom system"}
        assert kwargs["response_format"] == {"type": "json_object"}


class TestOllamaProvider:
    def test_provider_id(self) -> None:
        provider = get_provider("ollama")
        assert provider.default_model == "llama3"
        assert provider.env_var is None

    def test_missing_sdk(self) -> None:
        provider = get_provider("ollama")
        with (
            patch.dict("sys.modules", {"openai": None}),
            pytest.raises(ImportError, match="openai is required"),
        ):
            provider.complete("code", system="s")

    def test_local_base_url(self) -> None:
        provider = get_provider("ollama")
        mock_openai = MagicMock()
        create = mock_openai.OpenAI.return_value.chat.completions.create
        create.return_value.choices[0].message.content = "ok"

        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider.converse("s", [ConversationTurn(speaker="user", text="hi")])

        assert mock_openai.OpenAI.call_args.kwargs["base_url"] == "http://localhost:11434/v1"


# ---------------------------------------------------------------------------
# Gemini provider tests
# ---------------------------------------------------------------------------
class TestGeminiProvider:
    def test_provider_id(self) -> None:
        provider = get_provider("gemini")
        assert provider.default_model == "gemini-2.5-flash"
        assert provider.env_var == "GOOGLE_API_KEY"

    def test_missing_api_key(self) -> None:
        provider = get_provider("gemini")
        with (
            patch.dict("os.environ", {}, clear=True),
            patch.dict("sys.modules", _gemini_modules(*_mock_gemini_sdk())),
            pytest.raises(ValueError, match="GOOGLE_API_KEY"),
        ):
            provider.complete("code", system="s")

    def test_missing_sdk(self) -> None:
        provider = get_provider("gemini")
        with (
            patch.dict("os.environ", {"GOOGLE_API_KEY": "test-key"}),
            patch.dict("sys.modules", {"google": None, "google.genai": None}),
            pytest.raises(ImportError, match="google-genai is required"),
        ):
            provider.complete("code", system="s")

    def test_json_output_sets_mime(self) -> None:
        provider = get_provider("gemini")
        mock_google, mock_genai, mock_types = _mock_gemini_sdk('{"summary": ""}')

        with (
            patch.dict("os.environ", {"GOOGLE_API_KEY": "key"}),
            patch.dict("sys.modules", _gemini_modules(mock_google, mock_genai, mock_types)),
        ):
            result = provider.complete("p", system="custom system", temperature=0.5, json_output=True)

        assert result == '{"summary": ""}'
        config_kwargs = mock_types.GenerateContentConfig.call_args.kwargs
        assert config_kwargs["system_instruction"] == "custom system"
        assert config_kwargs["temperature"] == 0.5
        assert config_kwargs["response_mime_type"] == "application/json"
        assert "tools" not in config_kwargs

    def test_web_search_collects_sources(self) -> None:
        provider = get_provider("gemini")
        mock_google, mock_genai, mock_types = _mock_gemini_sdk("results")
        response = mock_genai.Client.return_value.models.generate_content.return_value
        web = MagicMock(uri="https://djinni.co/jobs/1", title="Djinni")
        response.candidates = [MagicMock()]
        response.candidates[0].grounding_metadata.grounding_chunks = [MagicMock(web=web)]

        with (
            patch.dict("os.environ", {"GOOGLE_API_KEY": "key"}),
            patch.dict("sys.modules", _gemini_modules(mock_google, mock_genai, mock_types)),
        ):
            provider.complete("p", system="s", json_output=True, web_search=True)

        config_kwargs = mock_types.GenerateContentConfig.call_args.kwargs
        assert "tools" in config_kwargs
        assert "response_mime_type" not in config_kwargs
        assert provider.last_sources == [{"uri": "https://djinni.co/jobs/1", "title": "Djinni"}]

    def test_converse_maps_roles(self) -> None:
        provider = get_provider("gemini")
        mock_google, mock_genai, mock_types = _mock_gemini_sdk("Q2")
        turns = [
            ConversationTurn(speaker="user", text="start"),
            ConversationTurn(speaker="assistant", text="Q1"),
            ConversationTurn(speaker="user", text="A1"),
        ]

        with (
            patch.dict("os.environ", {"GOOGLE_API_KEY": "key"}),
            patch.dict("sys.modules", _gemini_modules(mock_google, mock_genai, mock_types)),
        ):
            assert provider.converse("interviewer", turns) == "Q2"

        roles = [c.kwargs["role"] for c in mock_types.Content.call_args_list]
        assert roles == ["user", "model", "user"]


# ---------------------------------------------------------------------------
# Shared glue
# ---------------------------------------------------------------------------
class TestStripCodeFence:
    def test_json_fence(self) -> None:
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert strip_code_fence("```\n[]\n```") == "[]"

    def test_no_fence(self) -> None:
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestGenerateOnce:
    def test_passes_arguments(self, provider: FakeProvider) -> None:
        provider.replies = ["text"]
        result = generate_once(provider, "p", system="s", temperature=0.7, json_output=True)
        assert result == "text"
        call = provider.complete_calls[0]
        assert call["system"] == "s"
        assert call["temperature"] == 0.7
        assert call["json_output"] is True

    def test_failure_wrapped(self, provider: FakeProvider) -> None:
        provider.fail = True
        with pytest.raises(BackendError, match="upstream unavailable"):
            generate_once(provider, "p", system="s")


class TestChatHandle:
    def test_send_keeps_history(self, provider: FakeProvider) -> None:
        provider.replies = ["one", "two"]
        chat = ChatHandle(provider, "system")
        chat.send("a")
        chat.send("b")
        assert [t.text for t in chat.messages] == ["a", "one", "b", "two"]
        _, sent = provider.converse_calls[1]
        assert [t.text for t in sent] == ["a", "one", "b"]

    def test_prior_turns_seeded(self, provider: FakeProvider) -> None:
        prior = [
            ConversationTurn(speaker="user", text="hi"),
            ConversationTurn(speaker="assistant", text="hello"),
        ]
        chat = ChatHandle(provider, "system", prior)
        chat.send("next")
        _, sent = provider.converse_calls[0]
        assert len(sent) == 3

    def test_blank_reply_recorded_as_empty_reply(self, provider: FakeProvider) -> None:
        provider.replies = ["  "]
        chat = ChatHandle(provider, "system", empty_reply="Sorry?")
        assert chat.send("a") == "Sorry?"
        assert chat.messages[-1] == ConversationTurn(speaker="assistant", text="Sorry?")

    def test_failure_leaves_history(self, provider: FakeProvider) -> None:
        chat = ChatHandle(provider, "system")
        chat.send("a")
        provider.fail = True
        with pytest.raises(BackendError):
            chat.send("b")
        assert [t.text for t in chat.messages] == ["a", "ok"]
