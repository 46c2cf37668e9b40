"""Assistant facade: wires profile, ledger, sessions, curator and backend.

Data flow:
  1. Profile store supplies the bio for every prompt
  2. Context bridge reads the ledger when an interview starts
  3. Session manager runs the interview and intake chats
  4. One-shot phases (scan, architect, search, cover letter) call the backend
  5. Search responses go through the curator
  6. Every completed interaction is appended to the ledger
"""

import asyncio
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any

from mentor import prompts
from mentor.core.config import Settings
from mentor.core.db import init_db
from mentor.core.errors import BackendError, EmptyInputError, InvalidStateError
from mentor.core.schemas import Category, HistoryEntry, Profile, SearchPayload
from mentor.curator.results import curate
from mentor.curator.view import BrowsingView
from mentor.history.bridge import build_context
from mentor.history.ledger import HistoryLedger
from mentor.llm import LLMProvider, generate_once, get_provider
from mentor.profile.extractor import extract_file
from mentor.profile.store import ProfileStore
from mentor.session.manager import Session, SessionKind, SessionManager, SessionState

logger = logging.getLogger(__name__)

_DEFAULT_ARCHITECT_REQUEST = "Based on my profile"


class Assistant:
    """One user's assistant. Single control thread; no locking."""

    def __init__(
        self,
        settings: Settings,
        conn: sqlite3.Connection,
        provider: LLMProvider,
    ) -> None:
        self.settings = settings
        self._conn = conn
        self._provider = provider
        self.ledger = HistoryLedger.load(conn, settings.history.capacity)
        self.profiles = ProfileStore(conn, self.ledger)
        self.profiles.load()
        self.sessions = SessionManager(provider, settings, on_turn=self._persist_transcript)
        self.browsing = BrowsingView(category_limit=settings.history.category_limit)
        self._interview: Session | None = None
        self._intake: Session | None = None
        self._draft: Profile | None = None

    @classmethod
    def open(cls, settings: Settings, provider: LLMProvider | None = None) -> "Assistant":
        """Open storage and the configured provider."""
        conn = init_db(settings.storage.path)
        return cls(settings, conn, provider or get_provider(settings.llm.provider))

    def close(self) -> None:
        self._conn.close()

    @property
    def profile(self) -> Profile | None:
        return self.profiles.current

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    async def start_intake(
        self,
        name: str,
        email: str,
        github_url: str = "",
        linkedin_url: str = "",
        cv_text: str = "",
    ) -> Session:
        """Begin the intake chat. Name and email are required."""
        if not name.strip() or not email.strip():
            msg = "name and email are required"
            raise EmptyInputError(msg)
        self._draft = Profile(
            name=name.strip(),
            email=email.strip(),
            github_url=github_url.strip(),
            linkedin_url=linkedin_url.strip(),
            cv_text=cv_text,
            is_onboarded=False,
        )
        if self._intake is not None:
            self.sessions.terminate(self._intake)
        self._intake = await self.sessions.create(SessionKind.INTAKE, self._draft)
        return self._intake

    async def send_intake(self, text: str) -> str:
        if self._intake is None:
            msg = "intake has not been started"
            raise InvalidStateError(msg)
        return await self.sessions.send_turn(self._intake, text)

    async def finish_intake(self) -> Profile:
        """Summarize the intake into a bio, save the profile, end the chat."""
        if self._intake is None or self._draft is None:
            msg = "intake has not been started"
            raise InvalidStateError(msg)
        chat_history = "\n".join(
            f"{'model' if t.speaker == 'assistant' else 'user'}: {t.text}"
            for t in self._intake.transcript
        )
        bio = await self._summarize_profile(self._draft, chat_history)
        profile = self._draft.model_copy(update={"bio_summary": bio, "is_onboarded": True})
        self.profiles.save(profile)
        self.sessions.terminate(self._intake)
        self._intake = None
        self._draft = None
        logger.info("Onboarded profile for %s", profile.name)
        return profile

    def load_cv(self, path: str | Path) -> str:
        """Extract CV text from a file; format errors propagate to the caller."""
        return extract_file(path)

    # ------------------------------------------------------------------
    # One-shot phases
    # ------------------------------------------------------------------

    async def scan(self, user_input: str) -> HistoryEntry:
        """Phase 1: analyze code or a skills description."""
        if not user_input.strip():
            msg = "nothing to analyze"
            raise EmptyInputError(msg)
        profile = self.profile
        context = (
            f"USER CONTEXT: {profile.bio_summary}\nGitHub: {profile.github_url}"
            if profile else ""
        )
        messages = self.settings.messages
        text = await self._generate(
            f"{context}\n\nUSER INPUT TO ANALYZE: {user_input}",
            system=prompts.with_persona(prompts.SCANNER_PHASE),
            model=self.settings.llm.smart_model,
            temperature=0.4,
            error_text=messages.scan_error,
            empty_text=messages.scan_empty,
        )
        title = user_input[:40] + "..." if len(user_input) > 40 else user_input
        return self._archive(Category.SCAN, title or "Scan Result", text)

    async def roadmap(self, request: str = "") -> HistoryEntry:
        """Phase 2: learning roadmap."""
        messages = self.settings.messages
        text = await self._generate(
            self._architect_prompt(request),
            system=prompts.with_persona(prompts.ROADMAP_PHASE),
            temperature=0.5,
            error_text=messages.roadmap_error,
            empty_text=messages.roadmap_empty,
        )
        return self._archive(Category.ROADMAP, _architect_title("Roadmap: ", request), text)

    async def project(self, request: str = "") -> HistoryEntry:
        """Phase 2: portfolio project idea."""
        messages = self.settings.messages
        text = await self._generate(
            self._architect_prompt(request),
            system=prompts.with_persona(prompts.PROJECT_PHASE),
            temperature=0.7,
            error_text=messages.project_error,
            empty_text=messages.project_empty,
        )
        return self._archive(Category.PROJECT, _architect_title("Project Idea: ", request), text)

    async def search(self, query: str = "") -> HistoryEntry:
        """Phase 4: web job search, curated and loaded into the browsing view."""
        profile = self.profile
        actual_query = query.strip()
        if not actual_query:
            actual_query = (
                f"Junior positions for {profile.bio_summary}"
                if profile else self.settings.search.default_query
            )

        messages = self.settings.messages
        sources: list[dict[str, Any]] = []
        try:
            raw = await asyncio.to_thread(
                generate_once,
                self._provider,
                prompts.SEARCH_PROMPT.format(query=actual_query),
                system=prompts.with_persona(prompts.SEARCH_PHASE),
                model=self.settings.llm.fast_model,
                json_output=True,
                web_search=True,
            )
        except BackendError:
            logger.error("Search failed for '%s'", actual_query, exc_info=True)
            payload = SearchPayload(summary=messages.search_error)
        else:
            payload = curate(raw, self.settings.search, messages.parse_error)
            sources = list(self._provider.last_sources)

        self.browsing.load(payload)
        logger.info(
            "Search '%s': %d vacancies, %d internships",
            actual_query, len(payload.vacancies), len(payload.internships),
        )
        return self._archive(
            Category.SEARCH, f"Search: {actual_query[:20]}", payload, auxiliary=sources,
        )

    async def cover_letter(self, job_description: str) -> HistoryEntry:
        """Phase 4: match score and cover letter for a job description."""
        if not job_description.strip():
            msg = "job description must not be empty"
            raise EmptyInputError(msg)
        profile = self.profile
        context = (
            f"USER PROFILE: {profile.bio_summary}\nGithub: {profile.github_url}\n"
            f"LinkedIn: {profile.linkedin_url}\nCV Info: {profile.cv_text}"
            if profile else "Standard Junior Profile"
        )
        messages = self.settings.messages
        text = await self._generate(
            f"User Context: {context}\n\nJob Description: {job_description}",
            system=prompts.with_persona(prompts.COVER_LETTER_PHASE),
            temperature=0.5,
            error_text=messages.cover_letter_error,
            empty_text=messages.cover_letter_empty,
        )
        title = f"Cover Letter ({date.today().isoformat()})"
        return self._archive(Category.COVER_LETTER, title, text)

    # ------------------------------------------------------------------
    # Interview
    # ------------------------------------------------------------------

    async def start_interview(self) -> Session:
        """Resume the interview or start one with freshly bridged context."""
        if self._interview is not None and self._interview.state is not SessionState.TERMINATED:
            return self._interview
        bridged = build_context(self.ledger.snapshot())
        transcript = list(self.ledger.transcript())
        self._interview = await self.sessions.create(
            SessionKind.INTERVIEW, self.profile, bridged, transcript,
        )
        return self._interview

    async def send_interview(self, text: str) -> str:
        session = await self.start_interview()
        return await self.sessions.send_turn(session, text)

    # ------------------------------------------------------------------
    # History and lifecycle
    # ------------------------------------------------------------------

    def open_search_entry(self, entry: HistoryEntry) -> SearchPayload:
        """Load an archived search back into the browsing view."""
        if isinstance(entry.payload, SearchPayload):
            payload = entry.payload
        else:
            payload = SearchPayload(summary=entry.payload)
        self.browsing.load(payload)
        return payload

    def logout(self) -> None:
        """End every session, drop the profile and all history."""
        self.sessions.terminate_all()
        self._interview = None
        self._intake = None
        self._draft = None
        self.profiles.clear()
        self.browsing = BrowsingView(category_limit=self.settings.history.category_limit)

    def _archive(
        self,
        category: Category,
        title: str,
        payload: SearchPayload | str,
        auxiliary: Any = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(category=category, title=title, payload=payload, auxiliary=auxiliary)
        self.ledger.append(category, entry)
        return entry

    def _persist_transcript(self, session: Session) -> None:
        if session.kind is SessionKind.INTERVIEW:
            self.ledger.save_transcript(session.transcript)

    def _architect_prompt(self, request: str) -> str:
        profile = self.profile
        context = f"USER CONTEXT: {profile.bio_summary}" if profile else ""
        return f"{context}\n\nUSER REQUEST: {request.strip() or _DEFAULT_ARCHITECT_REQUEST}"

    async def _generate(
        self,
        prompt: str,
        *,
        system: str,
        error_text: str,
        empty_text: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """One-shot generation that never raises: failures become ``error_text``."""
        try:
            text = await asyncio.to_thread(
                generate_once,
                self._provider,
                prompt,
                system=system,
                model=model or self.settings.llm.fast_model,
                temperature=temperature,
            )
        except BackendError:
            logger.error("Generation failed", exc_info=True)
            return error_text
        return text if text.strip() else empty_text

    async def _summarize_profile(self, draft: Profile, chat_history: str) -> str:
        limit = self.settings.history.cv_max_chars
        cv = draft.cv_text
        if len(cv) > limit:
            cv = cv[:limit] + "...[TRUNCATED]"
        messages = self.settings.messages
        return await self._generate(
            prompts.PROFILE_SUMMARY_PROMPT.format(
                name=draft.name,
                email=draft.email,
                github=draft.github_url,
                linkedin=draft.linkedin_url,
                cv=cv,
                chat_history=chat_history,
            ),
            system=prompts.PROFILE_SUMMARY_SYSTEM,
            error_text=messages.profile_summary_error,
            empty_text=messages.profile_summary_empty,
        )


def _architect_title(prefix: str, request: str) -> str:
    return prefix + (request[:20] + "..." if request.strip() else "Auto-generated")


def export_markdown(entry: HistoryEntry, path: str | Path) -> Path:
    """Write a history entry to a Markdown file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(entry.payload, SearchPayload):
        lines = [f"# {entry.title}", "", entry.payload.summary, ""]
        for c in (*entry.payload.vacancies, *entry.payload.internships):
            lines.append(f"- [{c.title}]({c.url}) - {c.company}, {c.location}")
        body = "\n".join(lines) + "\n"
    else:
        body = f"# {entry.title}\n\n{entry.payload}\n"
    path.write_text(body, encoding="utf-8")
    return path
