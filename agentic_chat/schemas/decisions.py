"""
Schemas - Structured Output Models for LLM Responses

This module defines Pydantic models used for structured LLM outputs.
These schemas enforce strict JSON formatting on LLM responses for plan
synthesis, progress-log synthesis and multi-file archive generation.
"""
from typing import List
from pydantic import BaseModel, Field


class PlanDraft(BaseModel):
    """
    The ordered step list proposed for a task request.
    """
    steps: List[str] = Field(
        ...,
        description="Distinct, actionable steps an AI agent would take, in execution order."
    )


class StepLogs(BaseModel):
    """
    Short cosmetic status lines shown while a step runs.
    """
    lines: List[str] = Field(
        ...,
        description="2 or 3 realistic system-log status updates, each under 8 words."
    )


class ArchiveFile(BaseModel):
    name: str = Field(..., description="Relative path of the file inside the archive.")
    content: str = Field(..., description="Complete raw content of the file.")


class ArchiveManifest(BaseModel):
    """
    The file listing used to build a multi-file archive.
    """
    files: List[ArchiveFile] = Field(
        ...,
        description="Every file the archive must contain."
    )
