"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic state models (ChatSession, Message).
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSessionDBModel(SQLModel, table=True):
    """
    Persistence model for chat sessions.
    Maps 1-to-1 with the 'chat_sessions' table.
    """

    __tablename__ = "chat_sessions"

    session_id: str = Field(primary_key=True, index=True)
    title: str

    # The full ChatSession (messages, embedded plan snapshots, counters) as JSON;
    # JSONB on PostgreSQL, plain JSON elsewhere.
    state: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    )

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, index=True)
