"""
Capability Routing.

Selects the tool that services a plan step from its description alone, using
cheap deterministic keyword matching. Rules are evaluated in order and the
first match wins; KNOWLEDGE is the default.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..domain.models import Capability

# Word stems; each matches at a word start and may be inflected
# ("Searching", "Researched", "browsing").
NAVIGATION_WORDS = ("brows", "visit", "navigat", "open", "go to", "going to")
LOOKUP_WORDS = ("search", "googl", "research", "find", "look up", "looking up", "brows")
RECENCY_WORDS = ("latest", "recent", "today", "news", "current")

# Stripped from a step description to form the search query: the lookup
# stems (with their inflections) plus these whole filler words.
QUERY_FILLER_WORDS = ("for", "the", "web", "internet", "online", "on")

_URL_RE = re.compile(
    r"(https?://[^\s'\"<>]+"
    r"|www\.[^\s'\"<>]+"
    r"|\b[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?:com|org|net|io|dev|ai|gov|edu|co|app|info)(?:/[^\s'\"<>]*)?)",
    re.IGNORECASE,
)
_QUERY_STOP_RE = re.compile(
    r"\b(?:"
    + "|".join(rf"{re.escape(w)}\w*" for w in LOOKUP_WORDS)
    + "|"
    + "|".join(rf"{re.escape(w)}\b" for w in QUERY_FILLER_WORDS)
    + r")",
    re.IGNORECASE,
)


def _contains_any(text: str, words) -> bool:
    return any(re.search(rf"\b{re.escape(w)}\w*", text) for w in words)


def find_url(text: str) -> Optional[str]:
    """Returns the first URL-like token, with an https scheme added when missing."""
    match = _URL_RE.search(text or "")
    if not match:
        return None
    url = match.group(1).rstrip(".,;:!?)")
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


def derive_search_query(text: str) -> str:
    """Strips tool-trigger words from a step description."""
    query = _QUERY_STOP_RE.sub(" ", text or "")
    return " ".join(query.split())


@dataclass(frozen=True)
class RoutingRule:
    capability: Capability
    matches: Callable[[str], bool]


def _wants_browser(text: str) -> bool:
    return _contains_any(text, NAVIGATION_WORDS) and find_url(text) is not None


def _wants_search(text: str) -> bool:
    return _contains_any(text, LOOKUP_WORDS)


def _wants_recent_search(text: str) -> bool:
    return _wants_search(text) and _contains_any(text, RECENCY_WORDS)


def build_rules(strict_search: bool = False) -> List[RoutingRule]:
    """
    Ordered routing table. In strict mode a lookup verb alone is not enough
    to reach the search backend; the step must also ask for current data.
    """
    return [
        RoutingRule(Capability.BROWSER, _wants_browser),
        RoutingRule(Capability.SEARCH, _wants_recent_search if strict_search else _wants_search),
    ]


def route_step(description: str, rules: Optional[List[RoutingRule]] = None) -> Capability:
    text = (description or "").lower()
    for rule in rules if rules is not None else build_rules():
        if rule.matches(text):
            return rule.capability
    return Capability.KNOWLEDGE
