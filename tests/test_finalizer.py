import base64
import io
import zipfile

import pytest

from agentic_chat.domain.models import FileTarget
from agentic_chat.execution.finalizer import (
    ARCHIVE_PLACEHOLDER,
    ARCHIVE_PLACEHOLDER_NAME,
    FILE_PLACEHOLDER,
    SUMMARY_PLACEHOLDER,
    ArtifactFinalizer,
    strip_code_fences,
)
from agentic_chat.schemas.decisions import ArchiveFile

from .conftest import FakeLLM

STEPS = ["Research", "Write"]
CONTEXT = "\nStep 1: Found data.\nStep 2: Wrote it."


def unzip(content: str) -> dict:
    archive = zipfile.ZipFile(io.BytesIO(base64.b64decode(content)))
    return {name: archive.read(name).decode() for name in archive.namelist()}


class TestSummary:
    @pytest.mark.asyncio
    async def test_summary_without_target(self):
        artifact = await ArtifactFinalizer(FakeLLM()).finalize("compare", STEPS, CONTEXT)

        assert artifact.kind == "summary"
        assert artifact.content == "## Summary\n- Done"
        assert artifact.file_name is None

    @pytest.mark.asyncio
    async def test_summary_prompt_lists_steps_and_findings(self):
        llm = FakeLLM()
        await ArtifactFinalizer(llm).finalize("compare", STEPS, CONTEXT)

        prompt = llm.calls[0][1][0]["content"]
        assert "1. Research" in prompt
        assert "2. Write" in prompt
        assert "Step 2: Wrote it." in prompt

    @pytest.mark.asyncio
    async def test_summary_failure_uses_placeholder(self):
        artifact = await ArtifactFinalizer(FakeLLM(failures=("summary",))).finalize("x", STEPS, "")
        assert artifact.content == SUMMARY_PLACEHOLDER


class TestFile:
    @pytest.mark.asyncio
    async def test_file_content_and_type(self):
        target = FileTarget("report.md", "md")
        artifact = await ArtifactFinalizer(FakeLLM()).finalize("x", STEPS, CONTEXT, target)

        assert artifact.kind == "file"
        assert artifact.file_name == "report.md"
        assert artifact.file_type == "Markdown"
        assert artifact.is_zip is False
        assert artifact.content.startswith("# Report")

    @pytest.mark.asyncio
    async def test_code_fences_are_stripped(self):
        llm = FakeLLM(file_content="```python\nprint('hi')\n```")
        artifact = await ArtifactFinalizer(llm).finalize("x", STEPS, "", FileTarget("app.py", "py"))
        assert artifact.content == "print('hi')"

    @pytest.mark.asyncio
    async def test_failure_uses_placeholder(self):
        llm = FakeLLM(failures=("file",))
        artifact = await ArtifactFinalizer(llm).finalize("x", STEPS, "", FileTarget("a.txt", "txt"))
        assert artifact.content == FILE_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_blank_content_uses_placeholder(self):
        llm = FakeLLM(file_content="```\n```")
        artifact = await ArtifactFinalizer(llm).finalize("x", STEPS, "", FileTarget("a.txt", "txt"))
        assert artifact.content == FILE_PLACEHOLDER


class TestArchive:
    @pytest.mark.asyncio
    async def test_archive_holds_manifest_files(self):
        target = FileTarget("project.zip", "zip")
        artifact = await ArtifactFinalizer(FakeLLM()).finalize("x", STEPS, CONTEXT, target)

        assert artifact.kind == "archive"
        assert artifact.is_zip is True
        assert artifact.file_type == "ZIP Archive"
        assert unzip(artifact.content) == {"main.py": "print('hello')\n", "README.md": "# Project\n"}

    @pytest.mark.asyncio
    async def test_nameless_entries_are_skipped(self):
        llm = FakeLLM(archive_files=[ArchiveFile(name=" ", content="x"), ArchiveFile(name="a.txt", content="a")])
        artifact = await ArtifactFinalizer(llm).finalize("x", STEPS, "", FileTarget("p.zip", "zip"))
        assert unzip(artifact.content) == {"a.txt": "a"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("llm", [FakeLLM(failures=("archive",)), FakeLLM(archive_files=[])])
    async def test_failure_still_yields_a_valid_archive(self, llm):
        artifact = await ArtifactFinalizer(llm).finalize("x", STEPS, "", FileTarget("p.zip", "zip"))
        assert unzip(artifact.content) == {ARCHIVE_PLACEHOLDER_NAME: ARCHIVE_PLACEHOLDER}


class TestStripCodeFences:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("```json\n{\"a\": 1}\n```", "{\"a\": 1}"),
            ("```\nplain\n```\n", "plain"),
            ("no fences here", "no fences here"),
            ("text before\n```\ncode\n```", "text before\n```\ncode\n```"),
        ],
    )
    def test_strip(self, text, expected):
        assert strip_code_fences(text) == expected
