"""Core data models for the assistant engine."""

import threading
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    """Activity kinds that partition the history ledger."""

    SCAN = "scan"
    ROADMAP = "roadmap"
    PROJECT = "project"
    SEARCH = "search"
    COVER_LETTER = "cover_letter"


class Integrations(BaseModel):
    """Advisory external-tool toggles. No effect on engine behavior."""

    model_config = ConfigDict(frozen=True)

    notion: bool = False
    obsidian: bool = False


class Profile(BaseModel):
    """The single active user profile.

    Frozen: replaced wholesale. Only ``integrations`` is swapped via
    ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    github_url: str = ""
    linkedin_url: str = ""
    cv_text: str = ""
    bio_summary: str = ""
    is_onboarded: bool = True
    integrations: Integrations = Field(default_factory=Integrations)

    @field_validator("integrations", mode="before")
    @classmethod
    def integrations_default(cls, v: Any) -> Any:
        return Integrations() if v is None else v


class Candidate(BaseModel):
    """A job or internship listing from one search response.

    Frozen. Saved/hidden state lives in a separate overlay keyed by ``id``.
    Accepts the camelCase keys the backend emits.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    company: str = ""
    title: str = ""
    location: str = ""
    salary: str | None = None
    tags: tuple[str, ...] = ()
    description_snippet: str = ""
    source: str = ""
    url: str = ""
    date_posted: str = ""
    views_count: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v: Any) -> Any:
        if v is None or v == "":
            return uuid.uuid4().hex
        return v if isinstance(v, str) else str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, (str, int, float)):
            return (str(v),)
        return tuple(str(t) for t in v if t is not None)

    @field_validator("company", "title", "location", "description_snippet",
                     "source", "url", "date_posted", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("salary", mode="before")
    @classmethod
    def salary_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("views_count", mode="before")
    @classmethod
    def views_count_or_none(cls, v: Any) -> int | None:
        # "1.2k" and similar display strings carry no exact count.
        if isinstance(v, bool) or v is None:
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            return int(v)
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return None


class SearchPayload(BaseModel):
    """Structured result of one job search call."""

    model_config = ConfigDict(frozen=True)

    summary: str = ""
    vacancies: tuple[Candidate, ...] = ()
    internships: tuple[Candidate, ...] = ()

    @field_validator("vacancies", "internships", mode="before")
    @classmethod
    def list_default(cls, v: Any) -> Any:
        return () if v is None else v


_id_lock = threading.Lock()
_last_ns = 0


def _next_entry_id() -> str:
    """Return a unique id that sorts in creation order."""
    global _last_ns
    with _id_lock:
        now = time.time_ns()
        _last_ns = max(now, _last_ns + 1)
        return f"{_last_ns:020d}"


class HistoryEntry(BaseModel):
    """One archived interaction. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_next_entry_id)
    category: Category
    title: str
    payload: SearchPayload | str
    created_at: datetime = Field(default_factory=datetime.now)
    auxiliary: Any = None


Speaker = Literal["user", "assistant"]


class ConversationTurn(BaseModel):
    """One message in a transcript."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str

    @field_validator("speaker", mode="before")
    @classmethod
    def model_is_assistant(cls, v: Any) -> Any:
        return "assistant" if v == "model" else v
