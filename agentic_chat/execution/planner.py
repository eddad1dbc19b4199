"""
Plan Synthesis.

Turns a task request into an ordered list of free-text step descriptions.
Tool selection is not part of the plan; the executor routes each step later
from the same text.
"""

import logging
from typing import List

from ..llm.interface import LLMProvider
from ..schemas.decisions import PlanDraft
from ..services.exceptions import PlanSynthesisFailure
from .prompts import Template, render_messages

logger = logging.getLogger(__name__)

FALLBACK_STEPS = [
    "Analyze request",
    "Gather information",
    "Process data",
    "Generate report",
]


class PlanSynthesizer:
    def __init__(self, llm_provider: LLMProvider, step_count: int = 4):
        self.llm = llm_provider
        self.step_count = step_count

    async def synthesize(self, text: str) -> List[str]:
        """
        Returns a non-empty ordered list of step descriptions.
        Falls back to FALLBACK_STEPS when the planner fails or returns nothing.
        """
        try:
            draft = await self.llm.generate_structured_output(
                messages=render_messages(
                    Template.PLAN_SYNTHESIS, text=text, step_count=self.step_count
                ),
                response_model=PlanDraft,
            )
            return self._clean(draft)
        except Exception as e:
            logger.error(f"Plan synthesis failed, using fallback plan: {e}")
            return list(FALLBACK_STEPS)

    def _clean(self, draft: PlanDraft) -> List[str]:
        steps = [s.strip() for s in (draft.steps if draft else []) if s and s.strip()]
        if not steps:
            raise PlanSynthesisFailure("Planner returned no steps.")
        return steps
