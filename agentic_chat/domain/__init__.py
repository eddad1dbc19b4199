"""
Domain Layer - Static Value Objects

Defines the value objects exchanged between orchestration components:
Capabilities, FileTargets, SearchResponses and Artifacts.
"""

from agentic_chat.domain.models import (
    ARCHIVE_EXTENSIONS,
    Artifact,
    Capability,
    FileTarget,
    SearchResponse,
    SearchResult,
)

__all__ = [
    "ARCHIVE_EXTENSIONS",
    "Artifact",
    "Capability",
    "FileTarget",
    "SearchResponse",
    "SearchResult",
]
