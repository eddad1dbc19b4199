"""
Prompt rendering for the orchestration core.

Every LLM call is rendered from one .jinja2 file in the templates directory.
Undefined variables are errors, so a caller that forgets a template argument
fails loudly instead of sending a prompt with a hole in it. Rendered prompts
are wrapped as chat messages: the template becomes the system turn, and raw
user text (when the call has one) follows as the user turn.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .templates import Template

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".jinja2"


def _check_templates_present() -> None:
    """Fails at import if a Template constant has no file behind it."""
    available = {p.name for p in TEMPLATES_DIR.glob(f"*{TEMPLATE_SUFFIX}")}
    missing = sorted(
        f"{name}{TEMPLATE_SUFFIX}"
        for name in Template.names()
        if f"{name}{TEMPLATE_SUFFIX}" not in available
    )
    if missing:
        raise FileNotFoundError(f"Prompt templates missing from {TEMPLATES_DIR}: {', '.join(missing)}")


_check_templates_present()


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Prompts are plain text, never HTML.
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )


def render(template_name: str, **context) -> str:
    """Renders one prompt template by name (without the suffix)."""
    template = _environment().get_template(f"{template_name}{TEMPLATE_SUFFIX}")
    return template.render(**context).strip()


def render_messages(
    template_name: str, user_content: Optional[str] = None, **context
) -> List[Dict[str, str]]:
    """
    Renders `template_name` as the system message. `user_content` is
    appended verbatim as a user message when given.
    """
    messages = [{"role": "system", "content": render(template_name, **context)}]
    if user_content:
        messages.append({"role": "user", "content": user_content})
    return messages
