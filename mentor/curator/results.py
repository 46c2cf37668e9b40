"""Post-processing of one AI search response into a UI-ready candidate list.

Steps:
  1. parse_search_payload: markdown-tolerant JSON parse, fails soft
  2. repair_url: every candidate gets a navigable link
  3. extract_categories: top tags by frequency (trim-only, case-sensitive)
  4. filter_candidates: hidden ids out, optional case-insensitive tag filter

Tag counting and tag filtering deliberately differ in case handling.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from urllib.parse import quote

from pydantic import ValidationError

from mentor.core.config import SearchConfig
from mentor.core.errors import ParseError
from mentor.core.schemas import Candidate, SearchPayload
from mentor.llm.base import strip_code_fence

logger = logging.getLogger(__name__)

PARSE_ERROR_SUMMARY = "error parsing results"
DEFAULT_CATEGORY_LIMIT = 8

# encodeURIComponent leaves these unescaped.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def load_search_payload(raw_text: str) -> SearchPayload:
    """Parse backend text into a SearchPayload.

    Raises:
        ParseError: If the text is not a JSON object of the expected shape.
    """
    cleaned = strip_code_fence(raw_text or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse search response as JSON: {e}"
        raise ParseError(msg) from e
    if not isinstance(data, dict):
        msg = f"Search response must be a JSON object, got {type(data).__name__}"
        raise ParseError(msg)
    try:
        return SearchPayload.model_validate(data)
    except ValidationError as e:
        msg = f"Search response has an invalid shape: {e}"
        raise ParseError(msg) from e


def parse_search_payload(raw_text: str, error_summary: str = PARSE_ERROR_SUMMARY) -> SearchPayload:
    """Like ``load_search_payload`` but returns an empty payload on failure."""
    try:
        return load_search_payload(raw_text)
    except ParseError:
        logger.error("Could not parse search results", exc_info=True)
        return SearchPayload(summary=error_summary)


def fallback_url(candidate: Candidate, config: SearchConfig | None = None) -> str:
    """Build a search-engine URL from the candidate's title and company."""
    config = config or SearchConfig()
    query = quote(f"{candidate.title} {candidate.company}", safe=_URI_COMPONENT_SAFE)
    return f"{config.fallback_base}{query}{config.fallback_sites}"


def needs_repair(url: str, min_length: int = 15) -> bool:
    """True if a URL is empty, too short, or does not start with http:// or https://.

    A bare "http" substring anywhere in the text is not enough.
    """
    if not url or len(url) < min_length:
        return True
    return not url.lower().startswith(("http://", "https://"))


def repair_url(candidate: Candidate, config: SearchConfig | None = None) -> Candidate:
    """Return the candidate, with a fallback URL if its own is unusable."""
    config = config or SearchConfig()
    if not needs_repair(candidate.url, config.min_url_length):
        return candidate
    repaired = fallback_url(candidate, config)
    logger.debug("Repaired URL for '%s' (%s): %r", candidate.title, candidate.id, candidate.url)
    return candidate.model_copy(update={"url": repaired})


def repair_payload(payload: SearchPayload, config: SearchConfig | None = None) -> SearchPayload:
    """Apply ``repair_url`` to every vacancy and internship."""
    return payload.model_copy(update={
        "vacancies": tuple(repair_url(c, config) for c in payload.vacancies),
        "internships": tuple(repair_url(c, config) for c in payload.internships),
    })


def curate(
    raw_text: str,
    config: SearchConfig | None = None,
    error_summary: str = PARSE_ERROR_SUMMARY,
) -> SearchPayload:
    """Parse and repair a raw search response. Never raises."""
    return repair_payload(parse_search_payload(raw_text, error_summary), config)


def extract_categories(
    candidates: Iterable[Candidate],
    limit: int = DEFAULT_CATEGORY_LIMIT,
) -> list[tuple[str, int]]:
    """Most frequent tags, count descending, ties in first-seen order.

    Tags are trimmed but not case-folded: ``"React"`` and ``"react "`` are
    two buckets. Blank tags are ignored.
    """
    counts: dict[str, int] = {}
    for candidate in candidates:
        for tag in candidate.tags:
            key = tag.strip()
            if key:
                counts[key] = counts.get(key, 0) + 1
    # dict keeps insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return ranked[:limit]


def matches_category(candidate: Candidate, category_filter: str) -> bool:
    needle = category_filter.lower()
    return any(needle in tag.lower() for tag in candidate.tags)


def filter_candidates(
    candidates: Sequence[Candidate],
    hidden: Iterable[str] = (),
    category_filter: str | None = None,
) -> list[Candidate]:
    """Derived view: not hidden AND (no filter OR a tag contains the filter)."""
    hidden_ids = set(hidden)
    return [
        c for c in candidates
        if c.id not in hidden_ids
        and (not category_filter or matches_category(c, category_filter))
    ]


def is_search_link(url: str) -> bool:
    """True for search-page style URLs rather than a direct listing."""
    return "?" in url or "search" in url
