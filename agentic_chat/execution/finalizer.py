"""
Artifact Finalization.

Turns the accumulated step results into the task's final output: an inline
summary, a single generated file, or a multi-file zip archive. Every path
degrades to a deterministic placeholder instead of raising.
"""

import logging
import re
from typing import List, Optional

from ..domain.models import Artifact, FileTarget
from ..llm.interface import LLMProvider
from ..schemas.decisions import ArchiveManifest
from ..services.exceptions import FinalizationFailure
from ..tools.archive import pack_files
from ..tools.file_detection import file_type_for
from .prompts import Template, render_messages

logger = logging.getLogger(__name__)

SUMMARY_PLACEHOLDER = "Task completed. Here is the result of your request based on the steps taken."
FILE_PLACEHOLDER = "Error generating file content."
ARCHIVE_PLACEHOLDER = "Error generating archive contents."
ARCHIVE_PLACEHOLDER_NAME = "README.txt"

_FENCE_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Removes a single markdown fence wrapping the whole reply."""
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


class ArtifactFinalizer:
    def __init__(self, llm_provider: LLMProvider):
        self.llm = llm_provider

    async def finalize(
        self,
        original_text: str,
        step_descriptions: List[str],
        context: str,
        target: Optional[FileTarget] = None,
    ) -> Artifact:
        if target is None:
            return Artifact(
                kind="summary",
                content=await self._summary(original_text, step_descriptions, context),
            )
        if target.is_archive:
            return Artifact(
                kind="archive",
                content=await self._archive(original_text, step_descriptions, context, target),
                file_name=target.file_name,
                file_type=file_type_for(target.extension),
            )
        return Artifact(
            kind="file",
            content=await self._file(original_text, step_descriptions, context, target),
            file_name=target.file_name,
            file_type=file_type_for(target.extension),
        )

    async def _summary(self, text: str, steps: List[str], context: str) -> str:
        try:
            reply = await self.llm.generate_text(
                messages=render_messages(
                    Template.FINAL_SUMMARY, text=text, steps=steps, context=context
                )
            )
            if not reply or not reply.strip():
                raise FinalizationFailure("Empty summary.")
            return reply.strip()
        except Exception as e:
            logger.error(f"Summary generation failed: {e}")
            return SUMMARY_PLACEHOLDER

    async def _file(self, text: str, steps: List[str], context: str, target: FileTarget) -> str:
        try:
            reply = await self.llm.generate_text(
                messages=render_messages(
                    Template.FILE_CONTENT,
                    text=text,
                    steps=steps,
                    context=context,
                    file_name=target.file_name,
                    file_type=file_type_for(target.extension),
                )
            )
            content = strip_code_fences(reply or "")
            if not content.strip():
                raise FinalizationFailure(f"Empty content for {target.file_name}.")
            return content
        except Exception as e:
            logger.error(f"File generation failed for {target.file_name}: {e}")
            return FILE_PLACEHOLDER

    async def _archive(self, text: str, steps: List[str], context: str, target: FileTarget) -> str:
        """
        Returns the base64-encoded archive. On failure the archive still
        decodes, holding a single README with the error placeholder.
        """
        try:
            manifest = await self.llm.generate_structured_output(
                messages=render_messages(
                    Template.ARCHIVE_MANIFEST,
                    text=text,
                    steps=steps,
                    context=context,
                    file_name=target.file_name,
                ),
                response_model=ArchiveManifest,
            )
            files = [
                (f.name.strip(), strip_code_fences(f.content))
                for f in (manifest.files if manifest else [])
                if f.name and f.name.strip()
            ]
            if not files:
                raise FinalizationFailure(f"No files listed for {target.file_name}.")
            return pack_files(files)
        except Exception as e:
            logger.error(f"Archive generation failed for {target.file_name}: {e}")
            return pack_files([(ARCHIVE_PLACEHOLDER_NAME, ARCHIVE_PLACEHOLDER)])
