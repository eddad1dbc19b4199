import asyncio

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from agentic_chat.execution.engine import TaskOrchestrator
from agentic_chat.execution.executor import StepExecutor
from agentic_chat.execution.schemas.state_machine import RunOutcome
from agentic_chat.infrastructure.database.connection import init_db
from agentic_chat.repositories.session import InMemorySessionRepository, SqlSessionRepository
from agentic_chat.services.access import GuestAccessGate
from agentic_chat.services.chat import ChatService
from agentic_chat.services.exceptions import (
    AccessDeniedError,
    SessionBusyError,
    SessionNotFoundError,
)
from agentic_chat.state.models import DEFAULT_TITLE, AgentState, StepStatus
from agentic_chat.tools.browser import BrowserSession

from .conftest import FakeLLM, FakeSandbox


@pytest.fixture
def sandboxes():
    return []


@pytest.fixture
def service(sandboxes):
    def factory():
        llm = FakeLLM(intent="task", plan=["Visit tesla.com for specs", "Write report"])
        sandbox = FakeSandbox()
        sandboxes.append(sandbox)
        executor = StepExecutor(llm, browser=BrowserSession(sandbox))
        return TaskOrchestrator(llm, executor, log_line_delay=0, step_pause=0)

    return ChatService(
        session_repository=InMemorySessionRepository(),
        orchestrator_factory=factory,
        access_gate=GuestAccessGate(interaction_limit=2),
    )


class TestSessions:
    def test_create_and_list(self, service):
        first = service.create_session()
        second = service.create_session(username="ada")

        ids = {s.session_id for s in service.list_sessions()}
        assert ids == {first.session_id, second.session_id}
        assert first.title == DEFAULT_TITLE
        assert second.is_authenticated

    def test_rename(self, service):
        session = service.create_session()
        renamed = service.rename_session(session.session_id, "  EV research ")
        assert renamed.title == "EV research"

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.rename_session("missing", "x")
        with pytest.raises(SessionNotFoundError):
            service.stop("missing")
        assert service.get_session("missing") is None

    def test_agent_state_defaults_to_idle(self, service):
        session = service.create_session()
        assert service.agent_state(session.session_id) == AgentState.IDLE


class TestProcessMessage:
    @pytest.mark.asyncio
    async def test_task_run_is_persisted(self, service):
        session = service.create_session()

        result = await service.process_message(session.session_id, "compare the top EV makers in 2024 and more")

        assert result.outcome == RunOutcome.SUMMARY
        assert result.agent_state == AgentState.IDLE
        stored = service.get_session(session.session_id)
        assert stored.interaction_count == 1
        assert stored.title == "compare the top EV makers in 2..."
        assert [m.type for m in stored.messages] == ["text", "text", "plan", "text"]
        plan = stored.messages[2].plan
        assert plan.is_complete
        assert all(s.status == StepStatus.COMPLETED for s in plan.steps)

    @pytest.mark.asyncio
    async def test_title_is_set_once(self, service):
        session = service.create_session()
        await service.process_message(session.session_id, "first")
        await service.process_message(session.session_id, "second")
        assert service.get_session(session.session_id).title == "first"

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, service):
        session = service.create_session()
        with pytest.raises(ValueError):
            await service.process_message(session.session_id, "   ")
        assert service.get_session(session.session_id).messages == []

    @pytest.mark.asyncio
    async def test_unknown_session_is_rejected(self, service):
        with pytest.raises(SessionNotFoundError):
            await service.process_message("missing", "hi")

    @pytest.mark.asyncio
    async def test_busy_session_is_rejected(self, service):
        session = service.create_session()

        results = await asyncio.gather(
            service.process_message(session.session_id, "compare EV makers"),
            service.process_message(session.session_id, "another"),
            return_exceptions=True,
        )

        assert results[0].outcome == RunOutcome.SUMMARY
        assert isinstance(results[1], SessionBusyError)
        assert service.get_session(session.session_id).interaction_count == 1


class TestAccessGate:
    @pytest.mark.asyncio
    async def test_guest_limit(self, service):
        session = service.create_session()
        await service.process_message(session.session_id, "one")
        await service.process_message(session.session_id, "two")

        with pytest.raises(AccessDeniedError):
            await service.process_message(session.session_id, "three")
        assert service.get_session(session.session_id).interaction_count == 2

    @pytest.mark.asyncio
    async def test_guest_private_data_request(self, service):
        session = service.create_session()
        with pytest.raises(AccessDeniedError):
            await service.process_message(session.session_id, "summarize my Gmail inbox")

    @pytest.mark.asyncio
    async def test_signed_in_user_is_never_blocked(self, service):
        session = service.create_session(username="ada")
        for text in ("one", "two", "three", "check my calendar"):
            await service.process_message(session.session_id, text)
        assert service.get_session(session.session_id).interaction_count == 4


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_stop_when_idle_is_a_no_op(self, service):
        session = service.create_session()
        service.stop(session.session_id)
        result = await service.process_message(session.session_id, "compare EV makers")
        assert result.outcome == RunOutcome.SUMMARY

    @pytest.mark.asyncio
    async def test_delete_releases_remote_browser(self, service, sandboxes):
        session = service.create_session()
        await service.process_message(session.session_id, "compare EV makers")
        assert sandboxes[0].start_calls == 1

        assert await service.delete_session(session.session_id) is True
        assert sandboxes[0].stop_calls == 1
        assert service.get_session(session.session_id) is None
        assert await service.delete_session(session.session_id) is False

    @pytest.mark.asyncio
    async def test_shutdown_releases_every_browser(self, service, sandboxes):
        for _ in range(2):
            session = service.create_session(username="ada")
            await service.process_message(session.session_id, "compare EV makers")

        await service.shutdown()

        assert [s.stop_calls for s in sandboxes] == [1, 1]


class HeldStepLLM(FakeLLM):
    """Blocks inside the first step call until `release` is set."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def generate_text(self, messages, temperature=0.0):
        if "executing a step in a task" in messages[0]["content"]:
            self.entered.set()
            await self.release.wait()
        return await super().generate_text(messages, temperature)


def held_service(repository):
    llm = HeldStepLLM()

    def factory():
        return TaskOrchestrator(llm, StepExecutor(llm), log_line_delay=0, step_pause=0)

    return ChatService(session_repository=repository, orchestrator_factory=factory), llm


class TestDeleteDuringRun:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("backend", ["memory", "sql"])
    async def test_deleted_session_is_not_written_back(self, backend):
        if backend == "memory":
            repository = InMemorySessionRepository()
        else:
            engine = create_engine(
                "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
            )
            init_db(engine)
            repository = SqlSessionRepository(db_engine=engine)
        service, llm = held_service(repository)
        session = service.create_session()

        run = asyncio.create_task(service.process_message(session.session_id, "compare EV makers"))
        await llm.entered.wait()
        assert await service.delete_session(session.session_id) is True
        llm.release.set()
        result = await run

        assert result.outcome == RunOutcome.TERMINATED
        assert repository.get(session.session_id) is None
        assert service.list_sessions() == []
