"""
Chat Service - Application Orchestration Layer

This service is the entry point for all conversation operations. It owns the
session repository and one TaskOrchestrator per chat session, checks the
access gate, and persists every message the orchestrator publishes.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..execution.engine import TaskOrchestrator
from ..execution.observer import RunObserver
from ..execution.schemas.state_machine import RunOutcome
from ..repositories.session import SessionRepository
from ..state.models import DEFAULT_TITLE, AgentState, ChatSession, Message
from .access import AccessGate, OpenAccessGate
from .exceptions import AccessDeniedError, SessionBusyError, SessionNotFoundError

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30


class SessionTranscript(RunObserver):
    """
    Applies orchestrator publications to a ChatSession and saves it, so
    other readers see live step status and streamed text. Once closed
    (the session was deleted mid-run) nothing is written back.
    """

    def __init__(self, session: ChatSession, repository: SessionRepository):
        self.session = session
        self.repository = repository
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def save(self) -> None:
        if not self.closed:
            self.repository.save(self.session)

    def message_added(self, message: Message) -> None:
        self.session.messages.append(message)
        if message.role == "user" and self.session.title == DEFAULT_TITLE:
            self.session.title = _derive_title(message.content)
        self.save()

    def message_updated(self, message: Message) -> None:
        # The session may have been reloaded from storage, so match by id.
        for i, existing in enumerate(self.session.messages):
            if existing.id == message.id:
                self.session.messages[i] = message
                break
        self.save()


def _derive_title(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= TITLE_LENGTH:
        return text
    return text[:TITLE_LENGTH].rstrip() + "..."


@dataclass
class TurnResult:
    outcome: RunOutcome
    agent_state: AgentState
    messages: List[Message] = field(default_factory=list)


class ChatService:
    def __init__(
        self,
        session_repository: SessionRepository,
        orchestrator_factory: Callable[[], TaskOrchestrator],
        access_gate: Optional[AccessGate] = None,
    ):
        self.session_repo = session_repository
        self.orchestrator_factory = orchestrator_factory
        self.access_gate = access_gate or OpenAccessGate()
        self._orchestrators: Dict[str, TaskOrchestrator] = {}
        self._transcripts: Dict[str, SessionTranscript] = {}

    def create_session(self, username: Optional[str] = None) -> ChatSession:
        """Creates a new empty session."""
        return self.session_repo.create(username=username)

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Retrieves a session (for resuming)."""
        return self.session_repo.get(session_id)

    def list_sessions(self) -> List[ChatSession]:
        return self.session_repo.list()

    def rename_session(self, session_id: str, title: str) -> ChatSession:
        session = self._require(session_id)
        session.title = title.strip() or session.title
        self.session_repo.save(session)
        return session

    async def delete_session(self, session_id: str) -> bool:
        """Deletes a session and releases its remote resources."""
        transcript = self._transcripts.pop(session_id, None)
        if transcript is not None:
            transcript.close()
        orchestrator = self._orchestrators.pop(session_id, None)
        if orchestrator is not None:
            orchestrator.stop()
            await orchestrator.close()
        return self.session_repo.delete(session_id)

    def agent_state(self, session_id: str) -> AgentState:
        orchestrator = self._orchestrators.get(session_id)
        return orchestrator.state if orchestrator else AgentState.IDLE

    def stop(self, session_id: str) -> None:
        """Requests cancellation of the session's current run (no-op when idle)."""
        self._require(session_id)
        orchestrator = self._orchestrators.get(session_id)
        if orchestrator is not None:
            orchestrator.stop()

    async def process_message(self, session_id: str, user_text: str) -> TurnResult:
        """
        The Core Loop:
        1. Load Session
        2. Run the session's orchestrator (gate + busy checks happen there)
        3. Map rejections to service errors
        4. Count the interaction and save
        """
        # 1. Load Session
        session = self._require(session_id)
        orchestrator = self._orchestrator_for(session_id)

        # 2. Run
        transcript = SessionTranscript(session, self.session_repo)
        # A busy orchestrator rejects without publishing; keep the live transcript.
        if orchestrator.is_idle:
            self._transcripts[session_id] = transcript
        try:
            result = await orchestrator.run(
                user_text,
                observer=transcript,
                admit=lambda text: self.access_gate.allows(session, text),
            )
        finally:
            if self._transcripts.get(session_id) is transcript:
                del self._transcripts[session_id]

        # 3. Rejections
        if result.outcome == RunOutcome.REJECTED:
            logger.warning(f"Submission rejected for session {session_id}: {result.rejection}")
            if result.rejection == "busy":
                raise SessionBusyError(f"Session {session_id} is already running a task.")
            if result.rejection == "denied":
                raise AccessDeniedError("Sign in to continue.")
            raise ValueError("Message text must not be empty.")

        # 4. Count & Save
        session.interaction_count += 1
        transcript.save()

        return TurnResult(
            outcome=result.outcome,
            agent_state=orchestrator.state,
            messages=result.messages,
        )

    async def shutdown(self) -> None:
        for orchestrator in self._orchestrators.values():
            orchestrator.stop()
            await orchestrator.close()
        self._orchestrators.clear()

    def _require(self, session_id: str) -> ChatSession:
        session = self.session_repo.get(session_id)
        if not session:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def _orchestrator_for(self, session_id: str) -> TaskOrchestrator:
        if session_id not in self._orchestrators:
            self._orchestrators[session_id] = self.orchestrator_factory()
        return self._orchestrators[session_id]
