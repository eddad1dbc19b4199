"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..state.models import AgentState, Message


class CreateSessionRequest(BaseModel):
    username: Optional[str] = None


class CreateSessionResponse(BaseModel):
    session_id: str


class RenameSessionRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class UserMessage(BaseModel):
    text: str = Field(..., min_length=1)


class SessionSummary(BaseModel):
    session_id: str
    title: str
    created_at: datetime
    updated_at: datetime


class SessionRead(BaseModel):
    session_id: str
    title: str
    agent_state: AgentState
    messages: List[Message]
    interaction_count: int
    created_at: datetime
    updated_at: datetime


class ChatResponse(BaseModel):
    outcome: str
    agent_state: AgentState
    messages: List[Message]
