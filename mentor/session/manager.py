"""Session manager: lifecycle of stateful multi-turn conversations.

State machine per session::

    uninitialized --(first successful exchange)--> active
    uninitialized | active --(terminate)--> terminated

A terminated session never recovers; build a new one. Every ``send_turn``
appends exactly two turns (user, then assistant or fallback) so the
transcript is always balanced. Concurrent turns on one session are
rejected with ``SessionBusyError``.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from mentor import prompts
from mentor.core.config import Settings
from mentor.core.errors import BackendError, EmptyInputError, InvalidStateError, SessionBusyError
from mentor.core.schemas import ConversationTurn, Profile
from mentor.history.bridge import BridgedContext, render_context
from mentor.llm.base import ChatHandle, LLMProvider

logger = logging.getLogger(__name__)


class SessionKind(str, Enum):
    INTERVIEW = "interview"
    INTAKE = "intake"


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TERMINATED = "terminated"


class Session:
    """Live handle to one conversation. Owns its transcript."""

    def __init__(
        self,
        kind: SessionKind,
        system_context: str,
        handle: ChatHandle,
        transcript: list[ConversationTurn],
    ) -> None:
        self.kind = kind
        self._system_context = system_context
        self._handle = handle
        self.transcript = transcript
        self.state = SessionState.UNINITIALIZED
        self._in_flight = False

    @property
    def system_context(self) -> str:
        return self._system_context

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def count(self, speaker: str) -> int:
        return sum(1 for t in self.transcript if t.speaker == speaker)

    def __repr__(self) -> str:
        return (
            f"Session(kind={self.kind.value}, state={self.state.value}, "
            f"turns={len(self.transcript)})"
        )


TranscriptSink = Callable[[Session], None]


class SessionManager:
    """Creates sessions, runs turns, terminates sessions.

    Usage::

        manager = SessionManager(provider, settings)
        session = await manager.create(SessionKind.INTERVIEW, profile, bridged)
        reply = await manager.send_turn(session, "Hello")
        manager.terminate(session)
    """

    def __init__(
        self,
        provider: LLMProvider,
        settings: Settings | None = None,
        on_turn: TranscriptSink | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or Settings()
        self._on_turn = on_turn
        self._sessions: list[Session] = []

    async def create(
        self,
        kind: SessionKind,
        profile: Profile | None,
        bridged: BridgedContext | None = None,
        existing_transcript: list[ConversationTurn] | None = None,
    ) -> Session:
        """Build a session with a frozen system context.

        An empty transcript for a kind with an opening move gets one
        assistant turn before the session is returned.
        """
        transcript = existing_transcript if existing_transcript is not None else []
        system_context = self._system_context(kind, profile, bridged)
        opening = self._opening_message(kind, profile)

        prior = list(transcript)
        if opening and prior and prior[0].speaker == "assistant":
            # Replay the hidden opening so the backend history starts with a user turn.
            prior.insert(0, ConversationTurn(speaker="user", text=opening))

        handle = ChatHandle(
            self._provider,
            system_context,
            prior,
            model=self._model_for(kind),
            empty_reply=self._settings.messages.not_understood,
        )
        session = Session(kind, system_context, handle, transcript)
        self._sessions.append(session)
        logger.info("Created %s session (%d prior turns)", kind.value, len(transcript))

        if opening and not transcript:
            await self._open(session, opening)
        return session

    async def send_turn(self, session: Session, user_text: str) -> str:
        """Run one exchange and return the assistant text (or the fallback).

        Raises:
            InvalidStateError: The session is terminated.
            EmptyInputError: ``user_text`` is blank.
            SessionBusyError: Another turn is in flight on this session.
        """
        if session.state is SessionState.TERMINATED:
            msg = f"{session.kind.value} session is terminated"
            raise InvalidStateError(msg)
        if not user_text or not user_text.strip():
            msg = "message must not be empty"
            raise EmptyInputError(msg)
        if session.in_flight:
            msg = f"a turn is already in flight on this {session.kind.value} session"
            raise SessionBusyError(msg)

        session._in_flight = True
        try:
            reply, ok = await self._exchange(session, user_text)
            session.transcript.append(ConversationTurn(speaker="user", text=user_text))
            session.transcript.append(ConversationTurn(speaker="assistant", text=reply))
            if ok and session.state is SessionState.UNINITIALIZED:
                session.state = SessionState.ACTIVE
        finally:
            session._in_flight = False

        self._notify(session)
        return reply

    def terminate(self, session: Session) -> None:
        if session.state is SessionState.TERMINATED:
            return
        session.state = SessionState.TERMINATED
        if session in self._sessions:
            self._sessions.remove(session)
        logger.info("Terminated %s session", session.kind.value)

    def terminate_all(self) -> None:
        for session in list(self._sessions):
            self.terminate(session)

    async def _open(self, session: Session, opening: str) -> None:
        session._in_flight = True
        try:
            reply, ok = await self._exchange(session, opening)
            session.transcript.append(ConversationTurn(speaker="assistant", text=reply))
            if ok:
                session.state = SessionState.ACTIVE
        finally:
            session._in_flight = False
        self._notify(session)

    async def _exchange(self, session: Session, text: str) -> tuple[str, bool]:
        """Send through the chat handle. Returns (text, succeeded)."""
        messages = self._settings.messages
        try:
            reply = await asyncio.to_thread(session._handle.send, text)
        except BackendError:
            logger.error("Backend failed during %s turn", session.kind.value, exc_info=True)
            return messages.connection_error, False
        if not reply.strip():
            return messages.not_understood, True
        return reply, True

    def _notify(self, session: Session) -> None:
        if self._on_turn is not None:
            self._on_turn(session)

    def _model_for(self, kind: SessionKind) -> str | None:
        llm = self._settings.llm
        return llm.smart_model if kind is SessionKind.INTERVIEW else llm.fast_model

    @staticmethod
    def _system_context(
        kind: SessionKind,
        profile: Profile | None,
        bridged: BridgedContext | None,
    ) -> str:
        if kind is SessionKind.INTAKE:
            return prompts.INTAKE_SYSTEM
        bio = f"USER CONTEXT: {profile.bio_summary}" if profile and profile.bio_summary else ""
        bridged_text = render_context(bridged) if bridged is not None else ""
        return prompts.with_persona(prompts.INTERVIEW_PHASE, bridged_text, bio)

    @staticmethod
    def _opening_message(kind: SessionKind, profile: Profile | None) -> str | None:
        if kind is SessionKind.INTAKE:
            name = profile.name if profile else ""
            email = profile.email if profile else ""
            return prompts.INTAKE_OPENING.format(name=name, email=email)
        return prompts.INTERVIEW_OPENING
