"""
Remote Browser Sandbox.

The sandbox is an external process reachable over a narrow request/response
plus event channel: start() -> ready event, navigate(url) -> navigation
complete event, stop(). BrowserSession wraps one sandbox for a chat session,
makes start idempotent and bounds every wait with a timeout.
"""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class BrowserSandbox(ABC):
    """
    Contract for a remote browser. Implementations set `ready` once the
    remote session is usable and `navigation_complete` once the last
    requested page has loaded.
    """

    def __init__(self):
        self.ready = asyncio.Event()
        self.navigation_complete = asyncio.Event()

    @abstractmethod
    async def start(self) -> None:
        """Requests a new remote session. Returns without waiting for `ready`."""
        pass

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Requests navigation. Returns without waiting for `navigation_complete`."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Releases the remote session."""
        pass


class HttpBrowserSandbox(BrowserSandbox):
    """
    Sandbox proxy over HTTP. The proxy exposes:
        POST   /sessions                 -> {"session_id": ...}
        GET    /sessions/{id}            -> {"status": "starting|ready", "navigation": {"url", "state"}}
        POST   /sessions/{id}/navigate   <- {"url": ...}
        DELETE /sessions/{id}
    Events are derived by polling the status endpoint.
    """

    def __init__(
        self,
        base_url: str,
        poll_interval: float = 0.5,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._session_id: Optional[str] = None
        self._pending_url: Optional[str] = None
        self._watcher: Optional[asyncio.Task] = None

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        )
        try:
            response = await self._client.post("/sessions")
            response.raise_for_status()
            self._session_id = response.json()["session_id"]
        except Exception:
            await self._client.aclose()
            self._client = None
            raise
        logger.info(f"Sandbox session {self._session_id} requested")
        self._watcher = asyncio.create_task(self._watch())

    async def navigate(self, url: str) -> None:
        if not self._session_id or self._client is None:
            raise RuntimeError("Sandbox session has not been started.")
        self.navigation_complete.clear()
        self._pending_url = url
        response = await self._client.post(
            f"/sessions/{self._session_id}/navigate", json={"url": url}
        )
        response.raise_for_status()

    async def stop(self) -> None:
        if self._watcher:
            self._watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watcher
            self._watcher = None
        try:
            if self._session_id:
                response = await self._client.delete(f"/sessions/{self._session_id}")
                response.raise_for_status()
                logger.info(f"Sandbox session {self._session_id} released")
        finally:
            self._session_id = None
            self._pending_url = None
            self.ready.clear()
            self.navigation_complete.clear()
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def _watch(self) -> None:
        while self._session_id:
            try:
                response = await self._client.get(f"/sessions/{self._session_id}")
                response.raise_for_status()
                self._apply_status(response.json())
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Sandbox status poll failed: {e}")
            await asyncio.sleep(self.poll_interval)

    def _apply_status(self, status) -> None:
        if not isinstance(status, dict):
            raise ValueError(f"Unexpected sandbox status payload: {status!r}")
        if status.get("status") == "ready":
            self.ready.set()
        navigation = status.get("navigation")
        if not isinstance(navigation, dict):
            navigation = {}
        if (
            self._pending_url
            and navigation.get("url") == self._pending_url
            and navigation.get("state") == "complete"
        ):
            self.navigation_complete.set()


@dataclass
class NavigationOutcome:
    url: str
    loaded: bool


class BrowserSession:
    """
    One lazily created remote browser per chat session.
    A second start() on an already started session is a no-op.
    """

    def __init__(
        self,
        sandbox: BrowserSandbox,
        ready_timeout: float = 15.0,
        navigation_timeout: float = 10.0,
    ):
        self.sandbox = sandbox
        self.ready_timeout = ready_timeout
        self.navigation_timeout = navigation_timeout
        self._started = False
        self._lock: Optional[asyncio.Lock] = None

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> bool:
        """
        Starts the sandbox once and waits (bounded) for it to become ready.
        Returns whether the ready event was observed.
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if not self._started:
                await self.sandbox.start()
                self._started = True
        return await self._wait(self.sandbox.ready, self.ready_timeout, "ready")

    async def open(self, url: str) -> NavigationOutcome:
        """
        Navigates to `url`. A navigation timeout is not an error: the page
        is reported as not loaded and execution proceeds.
        """
        await self.start()
        await self.sandbox.navigate(url)
        loaded = await self._wait(
            self.sandbox.navigation_complete, self.navigation_timeout, "navigation"
        )
        return NavigationOutcome(url=url, loaded=loaded)

    async def close(self) -> None:
        if not self._started:
            return
        self._started = False
        await self.sandbox.stop()

    async def _wait(self, event: asyncio.Event, timeout: float, name: str) -> bool:
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Sandbox {name} event not received within {timeout}s; proceeding")
            return False
