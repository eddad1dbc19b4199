"""
Intent Classification.

Decides whether a user message is casual conversation ("chat") or a request
that needs a multi-step plan ("task"). The result gates the rest of the
pipeline, so the classifier never raises: any failure means "chat".
"""

import logging
from typing import Literal

from ..llm.interface import LLMProvider
from ..services.exceptions import ClassificationFailure
from .prompts import Template, render_messages

logger = logging.getLogger(__name__)

Intent = Literal["chat", "task"]


class IntentClassifier:
    def __init__(self, llm_provider: LLMProvider):
        self.llm = llm_provider

    async def classify(self, text: str) -> Intent:
        try:
            reply = await self.llm.generate_text(
                messages=render_messages(Template.INTENT_CLASSIFICATION, text=text)
            )
            return self._parse(reply)
        except Exception as e:
            logger.error(f"Intent classification failed: {e}")
            return "chat"

    def _parse(self, reply: str) -> Intent:
        answer = (reply or "").strip().lower()
        if not answer:
            raise ClassificationFailure("Empty classification reply.")
        return "task" if "task" in answer else "chat"
