"""Per-browsing-session overlay state layered on immutable candidates."""

import logging

from mentor.core.schemas import Candidate, SearchPayload
from mentor.curator.results import DEFAULT_CATEGORY_LIMIT, extract_categories, filter_candidates

logger = logging.getLogger(__name__)


class Overlay:
    """Saved and hidden candidate ids. Never persisted."""

    def __init__(self) -> None:
        self._saved: set[str] = set()
        self._hidden: set[str] = set()

    @property
    def saved(self) -> frozenset[str]:
        return frozenset(self._saved)

    @property
    def hidden(self) -> frozenset[str]:
        return frozenset(self._hidden)

    def toggle_saved(self, candidate_id: str) -> bool:
        """Flip saved state. Returns True if now saved."""
        return _toggle(self._saved, candidate_id)

    def toggle_hidden(self, candidate_id: str) -> bool:
        """Flip hidden state. Returns True if now hidden."""
        return _toggle(self._hidden, candidate_id)

    def is_saved(self, candidate_id: str) -> bool:
        return candidate_id in self._saved

    def is_hidden(self, candidate_id: str) -> bool:
        return candidate_id in self._hidden

    @property
    def saved_count(self) -> int:
        return len(self._saved)


def _toggle(ids: set[str], candidate_id: str) -> bool:
    if candidate_id in ids:
        ids.discard(candidate_id)
        return False
    ids.add(candidate_id)
    return True


class BrowsingView:
    """Current search payload plus overlay and category filter.

    Visible candidates and categories are recomputed from the current
    inputs on every read. Loading a new payload resets the filter; the
    overlay lives for the whole browsing session.
    """

    def __init__(
        self,
        payload: SearchPayload | None = None,
        category_limit: int = DEFAULT_CATEGORY_LIMIT,
    ) -> None:
        self.overlay = Overlay()
        self._payload = payload or SearchPayload()
        self._category_limit = category_limit
        self.category_filter: str | None = None

    @property
    def payload(self) -> SearchPayload:
        return self._payload

    def load(self, payload: SearchPayload) -> None:
        self._payload = payload
        self.category_filter = None
        logger.debug("Loaded %d vacancies into view", len(payload.vacancies))

    def set_filter(self, category: str | None) -> None:
        self.category_filter = category or None

    def visible(self) -> list[Candidate]:
        return filter_candidates(
            self._payload.vacancies, self.overlay.hidden, self.category_filter,
        )

    def categories(self) -> list[tuple[str, int]]:
        return extract_categories(self._payload.vacancies, self._category_limit)

    def saved_candidates(self) -> list[Candidate]:
        pool = (*self._payload.vacancies, *self._payload.internships)
        return [c for c in pool if self.overlay.is_saved(c.id)]
