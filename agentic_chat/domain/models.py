"""
Domain Layer - Static Value Objects

This module defines the immutable value objects that flow between the
orchestration components: the routing Capability chosen for a step, the
FileTarget detected in a request, the search results returned by the web
search backend, and the final Artifact produced for the user.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Optional


class Capability(str, Enum):
    """
    The external tool that services a single plan step.

    BROWSER: Open a URL in the remote browser sandbox.
    SEARCH: Query the web search backend.
    KNOWLEDGE: Answer from the model's own knowledge (also the universal fallback).
    """
    BROWSER = "browser"
    SEARCH = "search"
    KNOWLEDGE = "knowledge"


"""
FileOperation classifies what the user wants done with a named file:
- create: produce a new file (the default)
- edit: modify or fix an existing file
- convert: transform content into the named format
- analyze: read or review the named file
"""
FileOperation = Literal["create", "edit", "convert", "analyze"]


@dataclass(frozen=True)
class FileTarget:
    """
    A filename detected in the user's request.

    Attributes:
        file_name: The filename exactly as it appeared (e.g. "report.md").
        extension: Lower-cased extension without the dot (e.g. "md").
        operation: What the user asked to do with the file.
    """
    file_name: str
    extension: str
    operation: FileOperation = "create"

    @property
    def is_archive(self) -> bool:
        return self.extension in ARCHIVE_EXTENSIONS


ARCHIVE_EXTENSIONS = frozenset({"zip"})


@dataclass
class SearchResult:
    title: str
    content: str
    url: str


@dataclass
class SearchResponse:
    """
    Normalized response from a web search backend.

    Attributes:
        answer: Optional synthesized answer provided by the backend.
        results: Ranked results, best first.
    """
    answer: Optional[str] = None
    results: List[SearchResult] = field(default_factory=list)


ArtifactKind = Literal["summary", "file", "archive"]


@dataclass
class Artifact:
    """
    The finalized output of a task.

    Attributes:
        kind: summary (inline text), file (raw file text) or archive
            (base64-encoded zip bytes).
        content: The summary text, file content or base64 archive.
        file_name: Target filename for file and archive artifacts.
        file_type: Human-readable type label (e.g. "Markdown").
    """
    kind: ArtifactKind
    content: str
    file_name: Optional[str] = None
    file_type: Optional[str] = None

    @property
    def is_zip(self) -> bool:
        return bool(self.file_name and self.file_name.lower().endswith(".zip"))
