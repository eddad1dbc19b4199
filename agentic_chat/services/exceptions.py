"""
Service Layer Exceptions

Custom exceptions for the orchestration core and the ChatService.

The component failures (classification, planning, step execution,
finalization) are caught at their own boundary and converted into safe
defaults; they never reach the caller. CancellationRequested is a control
signal that only the TaskOrchestrator handles.
"""


class AgentError(Exception):
    """Base class for all errors raised inside the agent core."""
    pass


class ClassificationFailure(AgentError):
    """The intent classifier could not produce a decision."""
    pass


class PlanSynthesisFailure(AgentError):
    """The planner returned nothing usable."""
    pass


class StepExecutionFailure(AgentError):
    """A capability (browser, search, knowledge) failed for a step."""
    pass


class FinalizationFailure(AgentError):
    """The finalizer could not produce the requested artifact."""
    pass


class CancellationRequested(AgentError):
    """Raised at a suspend point after the user asked to stop the run."""
    pass


class SessionNotFoundError(AgentError):
    """Raised when a chat session id is unknown."""
    pass


class SessionBusyError(AgentError):
    """Raised when a message is submitted while a run is still in progress."""
    pass


class AccessDeniedError(AgentError):
    """Raised when the access gate refuses a submission (e.g. sign-in required)."""
    pass
