"""Cross-phase context: the latest entries of other categories.

Read once at session creation and frozen into that session's system
context; later ledger changes never reach an existing session.
"""

from pydantic import BaseModel, ConfigDict

from mentor.core.schemas import Category, HistoryEntry
from mentor.history.ledger import HistoryLedger, LedgerSnapshot


class BridgedContext(BaseModel):
    """Snapshot of the entries injected into a new conversation."""

    model_config = ConfigDict(frozen=True)

    last_project_or_roadmap: HistoryEntry | None = None
    last_scan: HistoryEntry | None = None

    @property
    def is_empty(self) -> bool:
        return self.last_project_or_roadmap is None and self.last_scan is None


def build_context(source: HistoryLedger | LedgerSnapshot) -> BridgedContext:
    """Read the current latest entries. Pure, never cached."""
    candidates = [
        e for e in (source.latest(Category.PROJECT), source.latest(Category.ROADMAP))
        if e is not None
    ]
    # Roadmaps and projects share one architect history; the newer one wins.
    # Ids are strictly increasing; wall-clock created_at can step backwards.
    newest = max(candidates, key=lambda e: e.id, default=None)
    return BridgedContext(
        last_project_or_roadmap=newest,
        last_scan=source.latest(Category.SCAN),
    )


def render_context(bridged: BridgedContext) -> str:
    """Render bridged entries as bracketed context lines for a system prompt."""
    lines: list[str] = []
    entry = bridged.last_project_or_roadmap
    if entry is not None:
        lines.append(
            f"[CONTEXT: User recently generated a {entry.category.value} "
            f'titled "{entry.title}". You can reference this if they ask.]'
        )
    if bridged.last_scan is not None:
        lines.append(
            "[CONTEXT: User recently scanned code/skills. "
            f'Result summary: "{bridged.last_scan.title}".]'
        )
    return "\n".join(lines)
