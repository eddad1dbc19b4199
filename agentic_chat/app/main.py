import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import Response

from ..config import settings
from .dependencies import close_chat_services, get_chat_service
from ..services.chat import ChatService
from ..services.exceptions import AccessDeniedError, SessionBusyError, SessionNotFoundError
from ..state.models import ChatSession
from .schemas import (
    ChatResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    RenameSessionRequest,
    SessionRead,
    SessionSummary,
    UserMessage,
)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield
    # Release remote browsers held by live sessions
    await close_chat_services()


app = FastAPI(title="Agentic Chat", lifespan=lifespan)


def _session_read(service: ChatService, session: ChatSession) -> SessionRead:
    return SessionRead(
        session_id=session.session_id,
        title=session.title,
        agent_state=service.agent_state(session.session_id),
        messages=session.messages,
        interaction_count=session.interaction_count,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )

# --- Endpoints ---

@app.post(
    "/sessions",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED
)
def create_session(
    request: CreateSessionRequest | None = None,
    service: ChatService = Depends(get_chat_service)
):
    """Starts a new empty session."""
    session = service.create_session(username=request.username if request else None)
    return CreateSessionResponse(session_id=session.session_id)


@app.get("/sessions", response_model=List[SessionSummary])
def list_sessions(service: ChatService = Depends(get_chat_service)):
    """Lists sessions, most recently updated first."""
    return [
        SessionSummary(
            session_id=s.session_id,
            title=s.title,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
        for s in service.list_sessions()
    ]


@app.get("/sessions/{session_id}", response_model=SessionRead)
def get_session(
    session_id: str,
    service: ChatService = Depends(get_chat_service)
):
    """
    Retrieves the full session resource, including live plan snapshots
    of a run that is still in progress.
    """
    session = service.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return _session_read(service, session)


@app.patch("/sessions/{session_id}", response_model=SessionRead)
def rename_session(
    session_id: str,
    request: RenameSessionRequest,
    service: ChatService = Depends(get_chat_service)
):
    try:
        session = service.rename_session(session_id, request.title)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _session_read(service, session)


@app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    service: ChatService = Depends(get_chat_service)
):
    """
    Deletes a session. Returns 204 No Content on success.
    """
    success = await service.delete_session(session_id)
    if not success:
        raise HTTPException(status_code=404, detail="Session not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/sessions/{session_id}/messages", response_model=ChatResponse)
async def handle_message(
    session_id: str,
    message: UserMessage,
    service: ChatService = Depends(get_chat_service)
):
    try:
        # Runs the full submission: chat reply, or plan + steps + artifact
        turn_result = await service.process_message(session_id, message.text)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    # Explicitly Map: TurnResult (Service) -> ChatResponse (API)
    return ChatResponse(
        outcome=turn_result.outcome.name,
        agent_state=turn_result.agent_state,
        messages=turn_result.messages,
    )


@app.post("/sessions/{session_id}/stop", status_code=status.HTTP_202_ACCEPTED)
async def stop_session(
    session_id: str,
    service: ChatService = Depends(get_chat_service)
):
    """Asks the running task to stop at its next checkpoint."""
    try:
        service.stop(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"session_id": session_id, "agent_state": service.agent_state(session_id)}
