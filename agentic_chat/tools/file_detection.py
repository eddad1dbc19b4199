"""
File Operation Detection.

Finds a target filename in a user's request ("... and save as report.md")
and classifies what the user wants done with it. The result decides both the
acknowledgment shown before planning and the finalization path after the
plan has run, so it is computed once per request.
"""

import re
from typing import Dict, Optional

from ..domain.models import FileOperation, FileTarget

# Extension -> human-readable file type label.
FILE_TYPES: Dict[str, str] = {
    "py": "Python",
    "js": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript React",
    "jsx": "JavaScript React",
    "html": "HTML",
    "css": "CSS",
    "json": "JSON",
    "txt": "Text",
    "md": "Markdown",
    "csv": "CSV",
    "xml": "XML",
    "yaml": "YAML",
    "yml": "YAML",
    "sql": "SQL",
    "sh": "Shell Script",
    "java": "Java",
    "go": "Go",
    "rs": "Rust",
    "c": "C",
    "cpp": "C++",
    "zip": "ZIP Archive",
}

DEFAULT_FILE_TYPE = "Code"

# Product names that look like filenames ("Build an API with Node.js").
FRAMEWORK_NAMES = frozenset(
    {
        "node.js",
        "next.js",
        "nuxt.js",
        "vue.js",
        "react.js",
        "express.js",
        "angular.js",
        "ember.js",
        "nest.js",
        "deno.js",
        "three.js",
        "d3.js",
        "chart.js",
        "p5.js",
        "moment.js",
    }
)

_FILENAME_RE = re.compile(
    r"(?<![\w./-])([\w][\w.-]*\.(" + "|".join(sorted(FILE_TYPES, key=len, reverse=True)) + r"))\b",
    re.IGNORECASE,
)

# Checked in order; the first matching verb wins.
_OPERATION_KEYWORDS = (
    ("edit", ("edit", "modify", "update", "fix", "refactor", "rewrite")),
    ("convert", ("convert", "transform", "translate", "export")),
    ("analyze", ("analyze", "analyse", "review", "read", "summarize", "summarise", "explain")),
)

_ACKS: Dict[str, str] = {
    "create": "I'll create {name} for you. Let me plan the work first.",
    "edit": "I'll update {name} for you. Let me work through the changes.",
    "convert": "I'll convert this into {name}. Let me plan the conversion.",
    "analyze": "I'll analyze {name} and report back with what I find.",
}


def detect_file_operation(text: str) -> Optional[FileTarget]:
    """
    Returns the first filename with a known extension found in `text`,
    or None when the request does not name a target file.
    """
    for match in _FILENAME_RE.finditer(text or ""):
        file_name = match.group(1).rstrip(".")
        if file_name.lower() in FRAMEWORK_NAMES:
            continue
        return FileTarget(
            file_name=file_name,
            extension=match.group(2).lower(),
            operation=_detect_operation(text),
        )
    return None


def _detect_operation(text: str) -> FileOperation:
    lowered = text.lower()
    for operation, keywords in _OPERATION_KEYWORDS:
        if any(re.search(rf"\b{kw}\b", lowered) for kw in keywords):
            return operation
    return "create"


def file_type_for(extension: str) -> str:
    return FILE_TYPES.get(extension.lower(), DEFAULT_FILE_TYPE)


def file_operation_ack(target: FileTarget) -> str:
    """Deterministic acknowledgment for a file-producing request."""
    return _ACKS[target.operation].format(name=target.file_name)
