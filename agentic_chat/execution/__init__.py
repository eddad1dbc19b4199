"""
Execution Layer - Task Orchestration and Step Execution

Defines the TaskOrchestrator (per-session state machine) and the workers it
drives: IntentClassifier, PlanSynthesizer, StepExecutor and ArtifactFinalizer.
"""

from agentic_chat.execution.cancellation import CancellationToken
from agentic_chat.execution.engine import TaskOrchestrator
from agentic_chat.execution.executor import StepExecutor
from agentic_chat.execution.finalizer import ArtifactFinalizer
from agentic_chat.execution.intent import IntentClassifier
from agentic_chat.execution.observer import RunObserver
from agentic_chat.execution.planner import PlanSynthesizer
from agentic_chat.execution.routing import route_step


__all__ = [
    "ArtifactFinalizer",
    "CancellationToken",
    "IntentClassifier",
    "PlanSynthesizer",
    "RunObserver",
    "StepExecutor",
    "TaskOrchestrator",
    "route_step",
]
