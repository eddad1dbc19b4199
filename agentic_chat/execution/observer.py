"""
Run observers.

The orchestrator never owns the transcript. It publishes every new message,
every mutation of an existing message (streamed chat text, plan snapshots)
and every AgentState change through a RunObserver supplied per run.
"""

from ..state.models import AgentState, Message


class RunObserver:
    """No-op base; subclasses override the callbacks they care about."""

    def message_added(self, message: Message) -> None:
        pass

    def message_updated(self, message: Message) -> None:
        pass

    def state_changed(self, state: AgentState) -> None:
        pass
