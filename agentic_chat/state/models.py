"""
State Layer - Runtime Data Models

This module defines the runtime state produced while a chat session is used:
the Plan being executed (and its Steps), the transcript Messages, and the
ChatSession that owns them. Plans are mutated in place by the orchestrator;
snapshots (deep copies) are what gets embedded into plan messages.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


DEFAULT_TITLE = "New Chat"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentState(str, Enum):
    """
    Per-session orchestrator state. Input is only accepted while IDLE.
    COMPLETED is kept for clients but every run falls back to IDLE.
    """
    IDLE = "IDLE"
    PLANNING = "PLANNING"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"


class StepStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class PlanStep(BaseModel):
    id: int
    description: str
    status: StepStatus = StepStatus.PENDING
    logs: List[str] = Field(default_factory=list)


class Plan(BaseModel):
    """
    An ordered, fixed-length list of steps for one task request.
    """
    id: str = Field(default_factory=_new_id)
    title: str
    steps: List[PlanStep] = Field(default_factory=list)
    is_complete: bool = False

    @property
    def active_step(self) -> Optional[PlanStep]:
        return next((s for s in self.steps if s.status == StepStatus.ACTIVE), None)

    def snapshot(self) -> "Plan":
        return self.model_copy(deep=True)


class FileData(BaseModel):
    name: str
    type: str
    size: str


class Message(BaseModel):
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant", "system"]
    content: str = ""
    type: Literal["text", "plan", "file"] = "text"
    plan: Optional[Plan] = None
    file_data: Optional[FileData] = None
    model_tag: Optional[str] = None
    is_zip: bool = False


class ChatSession(BaseModel):
    """
    A single chat conversation and its transcript.
    """
    session_id: str = Field(default_factory=_new_id)
    title: str = DEFAULT_TITLE
    messages: List[Message] = Field(default_factory=list)
    username: Optional[str] = None
    interaction_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_authenticated(self) -> bool:
        return self.username is not None

    def find_message(self, message_id: str) -> Optional[Message]:
        return next((m for m in self.messages if m.id == message_id), None)
