from agentic_chat.execution.schemas.state_machine import RunOutcome, RunResult

__all__ = [
    "RunOutcome",
    "RunResult",
]
