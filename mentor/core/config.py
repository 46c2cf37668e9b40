"""Configuration models and YAML loader for the assistant."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class StorageConfig(BaseModel):
    """Where the profile and history records live."""

    path: str = "data/mentor.db"


class HistoryConfig(BaseModel):
    """Retention limits for the history ledger and search categories."""

    capacity: int = Field(default=20, ge=1, le=500)
    category_limit: int = Field(default=8, ge=1)
    cv_max_chars: int = Field(default=50_000, ge=1000)


class LLMConfig(BaseModel):
    """Which provider and models back the assistant."""

    provider: str = "gemini"
    fast_model: str | None = None
    smart_model: str | None = None

    @field_validator("provider")
    @classmethod
    def provider_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "provider must not be empty"
            raise ValueError(msg)
        return v.strip().lower()


class MessagesConfig(BaseModel):
    """Fixed user-facing fallback texts."""

    connection_error: str = "A connection error occurred. Please try again."
    not_understood: str = "Sorry, I didn't understand that."
    scan_error: str = "Analysis failed."
    scan_empty: str = "Could not get an analysis."
    project_error: str = "Project generation failed."
    project_empty: str = "Could not generate a project idea."
    roadmap_error: str = "Roadmap generation failed."
    roadmap_empty: str = "Could not build a roadmap."
    cover_letter_error: str = "Job analysis failed."
    cover_letter_empty: str = "Could not analyze the job description."
    search_error: str = "Search failed."
    parse_error: str = "error parsing results"
    profile_summary_empty: str = "Junior Developer Profile"
    profile_summary_error: str = "Standard Junior Profile"


class SearchConfig(BaseModel):
    """Fallback search URL used when a candidate link is unusable."""

    fallback_base: str = "https://www.google.com/search?q="
    fallback_sites: str = "+site:djinni.co+OR+site:jobs.dou.ua"
    min_url_length: int = Field(default=15, ge=1)
    default_query: str = "Junior IT jobs Ukraine"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | Path | None) -> "Settings":
        """Load settings from YAML if the file exists, otherwise use defaults."""
        if path is None or not Path(path).exists():
            return cls()
        return cls.from_yaml(path)
