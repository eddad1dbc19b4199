"""
Cooperative cancellation for task runs.

A CancellationToken is owned by one TaskOrchestrator. The "stop" signal only
sets a flag; the orchestrator polls it immediately before and after every
suspend point. In-flight calls are never aborted, so cancellation latency is
bounded by one outstanding external call.
"""

from typing import Awaitable, TypeVar

from ..services.exceptions import CancellationRequested

T = TypeVar("T")


class CancellationToken:
    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def reset(self) -> None:
        self._cancelled = False

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancellationRequested()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Awaits a suspending call with a cancellation check on both sides.

        If the token is set before the call, the awaitable is closed without
        running. If it is set while the call is in flight, the result is
        discarded.
        """
        if self._cancelled:
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            raise CancellationRequested()
        result = await awaitable
        self.raise_if_cancelled()
        return result
