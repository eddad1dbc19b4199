import re
from typing import Callable, Dict, List, Optional

import pytest

from agentic_chat.domain.models import SearchResponse, SearchResult
from agentic_chat.execution.engine import TaskOrchestrator
from agentic_chat.execution.executor import StepExecutor
from agentic_chat.execution.observer import RunObserver
from agentic_chat.llm.interface import LLMProvider
from agentic_chat.schemas.decisions import ArchiveFile, ArchiveManifest, PlanDraft, StepLogs
from agentic_chat.state.models import AgentState, Message
from agentic_chat.tools.browser import BrowserSandbox
from agentic_chat.tools.search import SearchProvider

# Phrases that identify which prompt template a text call was rendered from.
TEXT_CALL_MARKERS = {
    "Classify the following user prompt": "intent",
    "Acknowledge the user's request": "ack",
    "executing a step in a task": "step",
    "Output ONLY the raw content of the file": "file",
    "Generate a concise final response": "summary",
}

STRUCTURED_CALL_KINDS = {
    PlanDraft: "plan",
    StepLogs: "logs",
    ArchiveManifest: "archive",
}


class FakeLLM(LLMProvider):
    """
    Scripted LLM. Each call is identified by kind (intent, ack, plan, step,
    logs, file, archive, summary, chat). Kinds listed in `failures` raise;
    `hooks[kind]` is invoked with the 1-based call number before replying.
    """

    def __init__(
        self,
        intent: str = "task",
        plan: Optional[List[str]] = None,
        logs: Optional[List[str]] = None,
        file_content: str = "# Report\n\nEV makers: Tesla, BYD, VW.",
        archive_files: Optional[List[ArchiveFile]] = None,
        summary: str = "## Summary\n- Done",
        ack: str = "Sure, I'll get started.",
        chat_chunks: Optional[List[str]] = None,
        failures: tuple = (),
    ):
        self.intent = intent
        self.plan = plan if plan is not None else ["Research EV makers", "Compare sales", "Analyze trends", "Write report"]
        self.logs = logs if logs is not None else ["Gathering sources...", "Summarizing notes..."]
        self.file_content = file_content
        self.archive_files = archive_files if archive_files is not None else [
            ArchiveFile(name="main.py", content="print('hello')\n"),
            ArchiveFile(name="README.md", content="# Project\n"),
        ]
        self.summary = summary
        self.ack = ack
        self.chat_chunks = chat_chunks if chat_chunks is not None else ["Hello", "! How can I help?"]
        self.failures = set(failures)
        self.hooks: Dict[str, Callable[[int], None]] = {}
        self.calls: List[tuple] = []

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)

    def _enter(self, kind: str, messages: List[dict]) -> None:
        self.calls.append((kind, messages))
        hook = self.hooks.get(kind)
        if hook:
            hook(self.count(kind))
        if kind in self.failures:
            raise RuntimeError(f"{kind} backend unavailable")

    async def generate_structured_output(self, messages, response_model, temperature=0.0):
        kind = STRUCTURED_CALL_KINDS[response_model]
        self._enter(kind, messages)
        if kind == "plan":
            return PlanDraft(steps=self.plan)
        if kind == "logs":
            return StepLogs(lines=self.logs)
        return ArchiveManifest(files=self.archive_files)

    async def generate_text(self, messages, temperature=0.0):
        prompt = messages[0]["content"]
        kind = next((k for marker, k in TEXT_CALL_MARKERS.items() if marker in prompt), "other")
        self._enter(kind, messages)
        if kind == "intent":
            return self.intent
        if kind == "ack":
            return self.ack
        if kind == "step":
            step = re.search(r"Current Step: (.*)", prompt).group(1)
            return f"Result for {step}."
        if kind == "file":
            return self.file_content
        if kind == "summary":
            return self.summary
        return ""

    async def stream_text(self, messages, temperature=0.0):
        self._enter("chat", messages)
        for chunk in self.chat_chunks:
            yield chunk


class FakeSearch(SearchProvider):
    def __init__(self, response: Optional[SearchResponse] = None, fail: bool = False):
        self.response = response or SearchResponse(
            answer="Tesla and BYD lead EV sales.",
            results=[
                SearchResult(title="EV sales 2024", content="BYD sold 3M EVs.", url="https://example.com/ev"),
                SearchResult(title="Tesla Q4", content="Tesla delivered 1.8M cars.", url="https://example.com/tesla"),
            ],
        )
        self.fail = fail
        self.queries: List[str] = []

    async def search(self, query: str) -> SearchResponse:
        self.queries.append(query)
        if self.fail:
            raise RuntimeError("search API down")
        return self.response


class FakeSandbox(BrowserSandbox):
    def __init__(self, auto_ready: bool = True, auto_load: bool = True):
        super().__init__()
        self.auto_ready = auto_ready
        self.auto_load = auto_load
        self.start_calls = 0
        self.stop_calls = 0
        self.visited: List[str] = []

    async def start(self) -> None:
        self.start_calls += 1
        if self.auto_ready:
            self.ready.set()

    async def navigate(self, url: str) -> None:
        self.navigation_complete.clear()
        self.visited.append(url)
        if self.auto_load:
            self.navigation_complete.set()

    async def stop(self) -> None:
        self.stop_calls += 1
        self.ready.clear()


class RecordingObserver(RunObserver):
    """Keeps deep copies of every publication, in order."""

    def __init__(self):
        self.events: List[tuple] = []
        self.messages: List[Message] = []

    def message_added(self, message: Message) -> None:
        self.messages.append(message)
        self.events.append(("added", message.model_copy(deep=True)))

    def message_updated(self, message: Message) -> None:
        self.events.append(("updated", message.model_copy(deep=True)))

    def state_changed(self, state: AgentState) -> None:
        self.events.append(("state", state))

    @property
    def states(self) -> List[AgentState]:
        return [payload for kind, payload in self.events if kind == "state"]

    def plan_snapshots(self):
        return [
            payload.plan
            for kind, payload in self.events
            if kind in ("added", "updated") and payload.type == "plan"
        ]


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def make_orchestrator():
    def _make(llm, search=None, browser=None):
        executor = StepExecutor(llm_provider=llm, search_provider=search, browser=browser)
        return TaskOrchestrator(
            llm_provider=llm,
            executor=executor,
            model_tag="Fast",
            log_line_delay=0,
            step_pause=0,
        )
    return _make
