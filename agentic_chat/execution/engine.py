"""
Engine - Task Orchestration Layer

The TaskOrchestrator is the per-session state machine ("The Manager") that
turns a user message into either a conversational reply or a planned,
step-by-step task run, delegating the actual work to the IntentClassifier,
PlanSynthesizer, StepExecutor and ArtifactFinalizer ("The Workers").
-----------------------------------------------

    IDLE --(submit)--> PLANNING --(plan ready)--> EXECUTING --(done / stopped)--> IDLE

The run is a sequence of suspending calls interleaved with synchronous state
publication. Cancellation is cooperative: stop() only sets a flag, which is
checked immediately before and after every suspend point (classifier,
acknowledgment, planner, each step's execution and log calls, finalization
and the pacing sleeps). When it trips, the run appends a single termination
message, closes the plan and returns to IDLE without a partial artifact.
"""

import asyncio
import logging
import math
from typing import Callable, List, Optional

from ..domain.models import Artifact, FileTarget
from ..llm.interface import LLMProvider
from ..services.exceptions import CancellationRequested
from ..state.models import AgentState, FileData, Message, Plan, PlanStep, StepStatus
from ..tools.file_detection import detect_file_operation, file_operation_ack
from .cancellation import CancellationToken
from .executor import StepExecutor
from .finalizer import ArtifactFinalizer
from .intent import IntentClassifier
from .observer import RunObserver
from .planner import PlanSynthesizer
from .prompts import Template, render_messages
from .schemas.state_machine import RunOutcome, RunResult

logger = logging.getLogger(__name__)

TERMINATION_MESSAGE = "I have terminated the task as requested."
CHAT_EMPTY_REPLY = "I'm here to help."
CHAT_FAILED_REPLY = "I'm having trouble connecting right now."
ACK_FALLBACK = "On it. Let me put together a plan."


class TaskOrchestrator:
    def __init__(
        self,
        llm_provider: LLMProvider,
        executor: StepExecutor,
        classifier: Optional[IntentClassifier] = None,
        planner: Optional[PlanSynthesizer] = None,
        finalizer: Optional[ArtifactFinalizer] = None,
        model_tag: Optional[str] = None,
        log_line_delay: float = 0.3,
        step_pause: float = 0.5,
        chat_temperature: float = 0.7,
    ):
        self.llm = llm_provider
        self.executor = executor
        self.classifier = classifier or IntentClassifier(llm_provider)
        self.planner = planner or PlanSynthesizer(llm_provider)
        self.finalizer = finalizer or ArtifactFinalizer(llm_provider)
        self.model_tag = model_tag
        self.log_line_delay = log_line_delay
        self.step_pause = step_pause
        self.chat_temperature = chat_temperature

        self.state = AgentState.IDLE
        self.current_plan: Optional[Plan] = None
        self.cancellation = CancellationToken()

        self._observer = RunObserver()
        self._plan_message: Optional[Message] = None
        self._produced: List[Message] = []

    @property
    def is_idle(self) -> bool:
        return self.state == AgentState.IDLE

    def stop(self) -> None:
        """Requests cancellation; honoured at the next suspend point."""
        logger.info("Stop requested")
        self.cancellation.cancel()

    async def close(self) -> None:
        """Releases the remote browser held for this session, if any."""
        if self.executor.browser is not None:
            await self.executor.browser.close()

    async def run(
        self,
        text: str,
        observer: Optional[RunObserver] = None,
        admit: Optional[Callable[[str], bool]] = None,
    ) -> RunResult:
        """
        The Orchestrator.

        Returns a REJECTED result without side effects unless the agent is
        IDLE, the text is non-blank and `admit` (the access gate) allows it.
        """
        if not self.is_idle:
            return RunResult(RunOutcome.REJECTED, rejection="busy")
        if not text or not text.strip():
            return RunResult(RunOutcome.REJECTED, rejection="empty")
        if admit is not None and not admit(text):
            return RunResult(RunOutcome.REJECTED, rejection="denied")

        self._observer = observer or RunObserver()
        self._produced = []
        self._plan_message = None
        self.current_plan = None

        # 1. Snapshot, clear cancellation, enter PLANNING
        self.cancellation.reset()
        self._set_state(AgentState.PLANNING)
        self._add(Message(role="user", content=text))

        try:
            # 2. Classify
            intent = await self.cancellation.guard(self.classifier.classify(text))
            logger.info(f"Intent classified as '{intent}'")

            # 3. / 4. Branch
            if intent == "chat":
                outcome = await self._reply(text)
            else:
                outcome = await self._run_task(text)
        except CancellationRequested:
            self._terminate()
            outcome = RunOutcome.TERMINATED
        finally:
            if not self.is_idle:
                self._set_state(AgentState.IDLE)

        return RunResult(outcome=outcome, messages=list(self._produced), plan=self.current_plan)

    # ==========================================================================
    # Chat Path
    # ==========================================================================

    async def _reply(self, text: str) -> RunOutcome:
        """
        Streams a conversational reply into one live message. Once stop is
        requested further chunks are drained but no longer applied.
        """
        message = self._add(Message(role="assistant", content="", model_tag=self.model_tag))
        chunks: List[str] = []
        try:
            async for chunk in self.llm.stream_text(
                messages=render_messages(Template.CHAT_REPLY, user_content=text),
                temperature=self.chat_temperature,
            ):
                if self.cancellation.cancelled:
                    continue
                chunks.append(chunk)
                message.content = "".join(chunks)
                self._update(message)
        except Exception as e:
            logger.error(f"Chat reply failed: {e}")
            if not chunks:
                message.content = CHAT_FAILED_REPLY
                self._update(message)

        if not message.content and not self.cancellation.cancelled:
            message.content = CHAT_EMPTY_REPLY
            self._update(message)

        self._set_state(AgentState.IDLE)
        return RunOutcome.CHAT

    # ==========================================================================
    # Task Path
    # ==========================================================================

    async def _run_task(self, text: str) -> RunOutcome:
        # Detected once; reused for the acknowledgment and the finalization path.
        target = detect_file_operation(text)

        if target is not None:
            ack = file_operation_ack(target)
        else:
            ack = await self.cancellation.guard(self._acknowledge(text))
        self._add(Message(role="assistant", content=ack, model_tag=self.model_tag))

        steps = await self.cancellation.guard(self.planner.synthesize(text))

        # 5. Build the plan and publish it
        plan = Plan(
            title=text,
            steps=[PlanStep(id=i, description=d) for i, d in enumerate(steps)],
        )
        self.current_plan = plan
        self._plan_message = self._add(
            Message(
                id=plan.id,
                role="assistant",
                type="plan",
                plan=plan.snapshot(),
                model_tag=self.model_tag,
            )
        )
        self._set_state(AgentState.EXECUTING)

        # 6. Execute steps in order
        context = await self._execute_plan(plan)

        # 7. - 9. Finalize
        self.cancellation.raise_if_cancelled()
        artifact = await self.cancellation.guard(
            self.finalizer.finalize(text, [s.description for s in plan.steps], context, target)
        )
        return self._deliver(plan, artifact, target)

    async def _execute_plan(self, plan: Plan) -> str:
        """Runs every step in index order and returns the execution context."""
        context = ""
        for step in plan.steps:
            self.cancellation.raise_if_cancelled()
            step.status = StepStatus.ACTIVE
            self._publish_plan()

            # Real work first, cosmetic logs afterwards.
            result = await self.cancellation.guard(
                self.executor.execute_step(step.description, context)
            )
            context += f"\nStep {step.id + 1}: {result}"

            logs = await self.cancellation.guard(
                self.executor.generate_logs(step.description, context)
            )
            for line in logs:
                self.cancellation.raise_if_cancelled()
                step.logs.append(line)
                self._publish_plan()
                await self._pause(self.log_line_delay)

            step.status = StepStatus.COMPLETED
            self._publish_plan()
            await self._pause(self.step_pause)
        return context

    def _deliver(self, plan: Plan, artifact: Artifact, target: Optional[FileTarget]) -> RunOutcome:
        plan.is_complete = True
        self._publish_plan()

        if artifact.kind == "summary":
            self._add(Message(role="assistant", content=artifact.content, model_tag=self.model_tag))
            outcome = RunOutcome.SUMMARY
        else:
            self._add(
                Message(
                    role="assistant",
                    type="file",
                    content=artifact.content,
                    model_tag=self.model_tag,
                    is_zip=artifact.is_zip,
                    file_data=FileData(
                        name=artifact.file_name or target.file_name,
                        type=artifact.file_type or "Code",
                        size=f"{math.ceil(len(artifact.content) / 1024)}KB",
                    ),
                )
            )
            outcome = RunOutcome.FILE

        self._set_state(AgentState.IDLE)
        return outcome

    async def _acknowledge(self, text: str) -> str:
        try:
            reply = await self.llm.generate_text(
                messages=render_messages(Template.TASK_ACKNOWLEDGMENT, text=text)
            )
            return reply.strip() if reply and reply.strip() else ACK_FALLBACK
        except Exception as e:
            logger.error(f"Acknowledgment failed: {e}")
            return ACK_FALLBACK

    def _terminate(self) -> None:
        logger.info("Run terminated by user")
        self._add(Message(role="assistant", content=TERMINATION_MESSAGE))
        if self.current_plan is not None and not self.current_plan.is_complete:
            self.current_plan.is_complete = True
            self._publish_plan()
        self._set_state(AgentState.IDLE)

    # ==========================================================================
    # Publication Helpers
    # ==========================================================================

    async def _pause(self, seconds: float) -> None:
        await self.cancellation.guard(asyncio.sleep(seconds))

    def _set_state(self, state: AgentState) -> None:
        self.state = state
        self._observer.state_changed(state)

    def _add(self, message: Message) -> Message:
        self._produced.append(message)
        self._observer.message_added(message)
        return message

    def _update(self, message: Message) -> None:
        self._observer.message_updated(message)

    def _publish_plan(self) -> None:
        if self._plan_message is None or self.current_plan is None:
            return
        self._plan_message.plan = self.current_plan.snapshot()
        self._update(self._plan_message)
