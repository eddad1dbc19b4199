"""
Agentic Chat

A chat assistant backend with a lightweight agentic task mode: requests are
classified as chat or task, tasks are planned into steps, each step is
executed through a model, web search or a remote browser, and the run ends
in an inline summary, a generated file or a zip archive.
"""

from agentic_chat.domain import (
    Artifact,
    Capability,
    FileTarget,
    SearchResponse,
    SearchResult,
)
from agentic_chat.state import (
    AgentState,
    ChatSession,
    FileData,
    Message,
    Plan,
    PlanStep,
    StepStatus,
)
from agentic_chat.schemas import ArchiveManifest, PlanDraft, StepLogs
from agentic_chat.execution import (
    ArtifactFinalizer,
    CancellationToken,
    IntentClassifier,
    PlanSynthesizer,
    StepExecutor,
    TaskOrchestrator,
)

__all__ = [
    # Domain Layer
    "Artifact",
    "Capability",
    "FileTarget",
    "SearchResponse",
    "SearchResult",
    # State Layer
    "AgentState",
    "ChatSession",
    "FileData",
    "Message",
    "Plan",
    "PlanStep",
    "StepStatus",
    # Schemas
    "ArchiveManifest",
    "PlanDraft",
    "StepLogs",
    # Execution Layer
    "ArtifactFinalizer",
    "CancellationToken",
    "IntentClassifier",
    "PlanSynthesizer",
    "StepExecutor",
    "TaskOrchestrator",
]
