from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

# State & Infra Imports
from ..state.models import ChatSession
from ..infrastructure.database.tables import ChatSessionDBModel
from ..infrastructure.database.connection import engine


class SessionRepository(ABC):
    """
    Defines how the application accesses chat sessions.
    This allows us change how data is stored (Memory -> SQL -> API) later
    without changing the ChatService code.
    """

    @abstractmethod
    def create(self, username: Optional[str] = None) -> ChatSession:
        """Creates a new empty session with a unique ID."""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[ChatSession]:
        """Retrieves a session by ID."""
        pass

    @abstractmethod
    def list(self) -> List[ChatSession]:
        """Returns all sessions, most recently updated first."""
        pass

    @abstractmethod
    def save(self, session: ChatSession):
        """Persists the session state and refreshes its updated_at."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Deletes a session. Returns True if found and deleted."""
        pass


class InMemorySessionRepository(SessionRepository):
    """
    Uses in-memory dictionary for session storage for testing/dev purposes.
    """

    def __init__(self):
        self._store: Dict[str, ChatSession] = {}

    def create(self, username: Optional[str] = None) -> ChatSession:
        session = ChatSession(username=username)
        self._store[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        return self._store.get(session_id)

    def list(self) -> List[ChatSession]:
        return sorted(self._store.values(), key=lambda s: s.updated_at, reverse=True)

    def save(self, session: ChatSession):
        session.updated_at = datetime.now(timezone.utc)
        self._store[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        if session_id in self._store:
            del self._store[session_id]
            return True
        return False


class SqlSessionRepository(SessionRepository):
    """
    SQL storage for chat sessions: one row per session, transcript as JSON.
    """

    def __init__(self, db_engine: Engine = engine):
        self.engine = db_engine

    def create(self, username: Optional[str] = None) -> ChatSession:
        # Create the (State) Python object
        session = ChatSession(username=username)

        # Save to DB
        db_model = ChatSessionDBModel(
            session_id=session.session_id,
            title=session.title,
            state=session.model_dump(mode="json"),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )

        with Session(self.engine) as db:
            db.add(db_model)
            db.commit()

        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        with Session(self.engine) as db:
            result = db.get(ChatSessionDBModel, session_id)
            if not result:
                return None

            # Deserialize JSON back into the Pydantic state model
            return ChatSession.model_validate(result.state)

    def list(self) -> List[ChatSession]:
        with Session(self.engine) as db:
            statement = select(ChatSessionDBModel).order_by(ChatSessionDBModel.updated_at.desc())
            return [ChatSession.model_validate(row.state) for row in db.exec(statement)]

    def save(self, session: ChatSession):
        session.updated_at = datetime.now(timezone.utc)
        with Session(self.engine) as db:
            result = db.get(ChatSessionDBModel, session.session_id)

            if result:
                # Update the JSON blob, title and timestamp
                result.state = session.model_dump(mode="json")
                result.title = session.title
                result.updated_at = session.updated_at
                db.add(result)
                db.commit()
            else:
                # Fallback if save() called on non-existent session
                raise ValueError(f"Session {session.session_id} does not exist in DB.")

    def delete(self, session_id: str) -> bool:
        with Session(self.engine) as db:
            result = db.get(ChatSessionDBModel, session_id)

            if result:
                db.delete(result)
                db.commit()
                return True
            return False
