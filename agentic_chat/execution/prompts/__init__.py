"""
Prompt templates for the orchestration core.
"""

from agentic_chat.execution.prompts.loader import render, render_messages
from agentic_chat.execution.prompts.templates import Template

__all__ = [
    "Template",
    "render",
    "render_messages",
]
