"""LLM provider registry with lazy loading.

Usage:
    from mentor.llm import ChatHandle, get_provider

    provider = get_provider("gemini")
    chat = ChatHandle(provider, system="You are a mentor.")
    reply = chat.send("Hello")
"""

from mentor.llm.base import ChatHandle, LLMProvider, generate_once, strip_code_fence

__all__ = [
    "ChatHandle",
    "LLMProvider",
    "available_providers",
    "generate_once",
    "get_provider",
    "strip_code_fence",
]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("mentor.llm.anthropic", "AnthropicProvider"),
    "openai": ("mentor.llm.openai", "OpenAIProvider"),
    "gemini": ("mentor.llm.gemini", "GeminiProvider"),
    "ollama": ("mentor.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Args:
        name: Provider identifier (anthropic, openai, gemini, ollama).

    Returns:
        An LLMProvider instance.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]

    import importlib

    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
