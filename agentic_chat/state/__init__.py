"""
State Layer - Runtime Data Models

Defines the runtime state of a chat session: plans and their steps,
transcript messages and the session itself.
"""

from agentic_chat.state.models import (
    AgentState,
    ChatSession,
    FileData,
    Message,
    Plan,
    PlanStep,
    StepStatus,
)

__all__ = [
    "AgentState",
    "ChatSession",
    "FileData",
    "Message",
    "Plan",
    "PlanStep",
    "StepStatus",
]
