"""Shared fixtures: a scripted in-memory LLM provider and a temp database."""

import sqlite3
import threading
from pathlib import Path
from typing import Any

import pytest

from mentor.core.db import init_db
from mentor.core.schemas import ConversationTurn
from mentor.llm.base import LLMProvider

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeProvider(LLMProvider):
    """Returns queued replies (or ``default_reply``); fails when ``fail`` is set.

    If ``gate`` is set, calls block until it is released, to simulate a
    slow backend.
    """

    def __init__(self, replies: list[str] | None = None) -> None:
        super().__init__()
        self.replies = list(replies or [])
        self.default_reply = "ok"
        self.fail = False
        self.gate: threading.Event | None = None
        self.complete_calls: list[dict[str, Any]] = []
        self.converse_calls: list[tuple[str, list[ConversationTurn]]] = []

    @property
    def provider_id(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    @property
    def env_var(self) -> None:
        return None

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
        self.complete_calls.append({
            "prompt": prompt,
            "model": model,
            "system": system,
            "temperature": temperature,
            "json_output": json_output,
            "web_search": web_search,
        })
        return self._next()

    def converse(
        self,
        system: str,
        messages: list[ConversationTurn],
        model: str | None = None,
    ) -> str:
        self.converse_calls.append((system, list(messages)))
        return self._next()

    @property
    def call_count(self) -> int:
        return len(self.complete_calls) + len(self.converse_calls)

    def _next(self) -> str:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail:
            msg = "upstream unavailable"
            raise RuntimeError(msg)
        return self.replies.pop(0) if self.replies else self.default_reply


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    conn = init_db(tmp_path / "mentor.db")
    yield conn  # type: ignore[misc]
    conn.close()
