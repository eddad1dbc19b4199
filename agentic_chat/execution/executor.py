"""
Executor - Agentic Step Execution Layer

This module defines the StepExecutor, a stateless wrapper around the LLM and
the optional tools (web search, remote browser) that executes a single plan
step. The executor routes the step to a capability, gathers tool output and
asks the model for a short factual result.

Failures never leave this module: a broken tool degrades to knowledge-only
execution and a broken model call degrades to a placeholder result.
"""

import logging
from typing import List, Optional

from ..domain.models import Capability
from ..llm.interface import LLMProvider
from ..schemas.decisions import StepLogs
from ..services.exceptions import StepExecutionFailure
from ..tools.browser import BrowserSession
from ..tools.search import SearchProvider
from .prompts import Template, render_messages
from .routing import build_rules, derive_search_query, find_url, route_step

logger = logging.getLogger(__name__)

SEARCH_CONTEXT_LIMIT = 8000

EMPTY_RESULT = "Step completed."
FAILED_RESULT = "Completed step."
EMPTY_LOGS = ["Processing..."]
FAILED_LOGS = ["Processing step...", "Analyzing data..."]


class StepExecutor:
    def __init__(
        self,
        llm_provider: LLMProvider,
        search_provider: Optional[SearchProvider] = None,
        browser: Optional[BrowserSession] = None,
        strict_search: bool = False,
    ):
        self.llm = llm_provider
        self.search_provider = search_provider
        self.browser = browser
        self.rules = build_rules(strict_search)

    def route(self, description: str) -> Capability:
        return route_step(description, self.rules)

    async def execute_step(self, description: str, context: str) -> str:
        """
        Executes one step and returns its textual result. Never raises.
        """
        capability = self.route(description)
        logger.info(f"Executing step via {capability.value}: {description}")

        search_results = ""
        browser_report = ""
        if capability == Capability.SEARCH:
            search_results = await self._search(description)
        elif capability == Capability.BROWSER:
            browser_report = await self._browse(description)

        return await self._answer(description, context, search_results, browser_report)

    async def generate_logs(self, description: str, context: str) -> List[str]:
        """
        Produces short cosmetic progress lines for the UI. Never raises and
        has no effect on the step result.
        """
        try:
            logs = await self.llm.generate_structured_output(
                messages=render_messages(Template.STEP_LOGS, step=description, context=context),
                response_model=StepLogs,
            )
        except Exception as e:
            logger.error(f"Log generation failed: {e}")
            return list(FAILED_LOGS)
        lines = [line.strip() for line in (logs.lines if logs else []) if line and line.strip()]
        return lines or list(EMPTY_LOGS)

    # ==========================================================================
    # Capabilities
    # ==========================================================================

    async def _search(self, description: str) -> str:
        """Returns formatted search results, or "" to fall back to knowledge."""
        query = derive_search_query(description)
        if not query or self.search_provider is None:
            logger.info("No search provider or empty query, using internal knowledge")
            return ""
        try:
            response = await self.search_provider.search(query)
        except Exception as e:
            logger.error(f"Search failed for '{query}': {e}")
            return ""
        if not response.results:
            return ""

        formatted = "\n\n".join(
            f"[{i}] {r.title}\n{r.content}\nSource: {r.url}"
            for i, r in enumerate(response.results, start=1)
        )
        if response.answer:
            formatted = f"Summary: {response.answer}\n\n--- Detailed Results ---\n{formatted}"
        return formatted[:SEARCH_CONTEXT_LIMIT]

    async def _browse(self, description: str) -> str:
        """Opens the step's URL in the remote browser and describes what happened."""
        url = find_url(description)
        if self.browser is None or url is None:
            return "No remote browser is available for this step; answering from internal knowledge."
        try:
            outcome = await self.browser.open(url)
        except Exception as e:
            logger.error(f"Navigation to {url} failed: {e}")
            return f"I tried to open {url} in the remote browser but it could not be loaded ({e})."
        if outcome.loaded:
            return f"I opened {outcome.url} in the remote browser and the page finished loading."
        return f"I requested {outcome.url} in the remote browser; the page did not confirm loading in time."

    async def _answer(
        self, description: str, context: str, search_results: str, browser_report: str
    ) -> str:
        messages = render_messages(
            Template.STEP_EXECUTION,
            step=description,
            context=context,
            search_results=search_results,
            browser_report=browser_report,
        )
        try:
            reply = await self.llm.generate_text(messages=messages)
            if not reply or not reply.strip():
                raise StepExecutionFailure("Empty step result.")
            return reply.strip()
        except StepExecutionFailure:
            return EMPTY_RESULT
        except Exception as e:
            logger.error(f"Step execution failed: {e}")
            return FAILED_RESULT
