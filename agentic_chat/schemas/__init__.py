"""
Schemas - Structured Output Models for LLM Responses

Defines Pydantic models used for structured LLM outputs, ensuring
predictable and parseable results from the planner, executor and finalizer.
"""

from agentic_chat.schemas.decisions import (
    ArchiveFile,
    ArchiveManifest,
    PlanDraft,
    StepLogs,
)

__all__ = [
    "ArchiveFile",
    "ArchiveManifest",
    "PlanDraft",
    "StepLogs",
]
