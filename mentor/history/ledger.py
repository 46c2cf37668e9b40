"""History ledger: one bounded, newest-first log per category.

The category table is fixed at construction (one deque per ``Category``);
the capacity is the only invariant worth guarding. The whole ledger, plus
the ongoing interview transcript, is persisted as a single record after
every mutation. Memory is authoritative; a failed write is logged and the
next mutation rewrites the full snapshot.
"""

import json
import logging
import sqlite3
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from mentor.core.db import HISTORY_RECORD, read_record, write_record
from mentor.core.schemas import Category, ConversationTurn, HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20
_TRANSCRIPT_KEY = "interview"


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable point-in-time view of every category."""

    entries: Mapping[Category, tuple[HistoryEntry, ...]]
    transcript: tuple[ConversationTurn, ...] = ()

    def list(self, category: Category) -> tuple[HistoryEntry, ...]:
        return self.entries.get(category, ())

    def latest(self, category: Category) -> HistoryEntry | None:
        items = self.list(category)
        return items[0] if items else None


class HistoryLedger:
    """Fixed table of bounded queues, one per category.

    Usage::

        ledger = HistoryLedger.load(conn)
        ledger.append(Category.SCAN, entry)
        ledger.latest(Category.SCAN)
    """

    def __init__(
        self,
        conn: sqlite3.Connection | None = None,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        if capacity < 1:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._conn = conn
        self._capacity = capacity
        self._queues: dict[Category, deque[HistoryEntry]] = {
            c: deque(maxlen=capacity) for c in Category
        }
        self._transcript: list[ConversationTurn] = []

    @classmethod
    def load(
        cls,
        conn: sqlite3.Connection,
        capacity: int = DEFAULT_CAPACITY,
    ) -> "HistoryLedger":
        """Restore the ledger from storage. A corrupt record yields an empty ledger."""
        ledger = cls(conn, capacity)
        try:
            raw = read_record(conn, HISTORY_RECORD)
        except sqlite3.Error as e:
            logger.warning("Failed to read history record: %s", e)
            return ledger
        if raw is None:
            return ledger
        try:
            ledger._restore(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, TypeError, AttributeError) as e:
            logger.warning("History record is corrupt, starting empty: %s", e)
            ledger._clear_memory()
        return ledger

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, category: Category, entry: HistoryEntry) -> None:
        """Prepend an entry; the oldest entry beyond capacity is evicted."""
        if entry.category is not category:
            msg = f"entry category '{entry.category.value}' does not match '{category.value}'"
            raise ValueError(msg)
        self._queues[category].appendleft(entry)
        logger.debug(
            "Appended '%s' to %s (%d/%d)",
            entry.title, category.value, len(self._queues[category]), self._capacity,
        )
        self._persist()

    def list(self, category: Category) -> tuple[HistoryEntry, ...]:
        """Entries for a category, newest first."""
        return tuple(self._queues[category])

    def latest(self, category: Category) -> HistoryEntry | None:
        queue = self._queues[category]
        return queue[0] if queue else None

    def reset_all(self) -> None:
        """Empty every category and the interview transcript."""
        self._clear_memory()
        logger.info("History ledger reset")
        self._persist()

    def transcript(self) -> tuple[ConversationTurn, ...]:
        """The persisted interview transcript."""
        return tuple(self._transcript)

    def save_transcript(self, turns: Iterable[ConversationTurn]) -> None:
        """Replace the persisted interview transcript."""
        self._transcript = list(turns)
        self._persist()

    def snapshot(self) -> LedgerSnapshot:
        entries = {c: tuple(q) for c, q in self._queues.items()}
        return LedgerSnapshot(
            entries=MappingProxyType(entries),
            transcript=tuple(self._transcript),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            c.value: [e.model_dump(mode="json") for e in q]
            for c, q in self._queues.items()
        }
        data[_TRANSCRIPT_KEY] = [t.model_dump(mode="json") for t in self._transcript]
        return data

    def _restore(self, data: dict[str, Any]) -> None:
        for category in Category:
            items = data.get(category.value) or []
            entries = [HistoryEntry.model_validate(item) for item in items]
            # Stored newest first; anything past capacity is dropped.
            self._queues[category].extend(
                e for e in entries[: self._capacity] if e.category is category
            )
        turns = data.get(_TRANSCRIPT_KEY) or []
        self._transcript = [ConversationTurn.model_validate(t) for t in turns]

    def _clear_memory(self) -> None:
        for queue in self._queues.values():
            queue.clear()
        self._transcript = []

    def _persist(self) -> None:
        if self._conn is None:
            return
        try:
            write_record(self._conn, HISTORY_RECORD, json.dumps(self.to_dict(), ensure_ascii=False))
        except sqlite3.Error as e:
            logger.warning("Failed to persist history: %s", e)
