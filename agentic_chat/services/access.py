"""
Access Gate.

Decides whether a chat session may submit a message. Anonymous (guest)
sessions get a limited number of interactions and may not ask for anything
that touches private data; signed-in sessions are never blocked.
"""
from abc import ABC, abstractmethod

from ..state.models import ChatSession

PRIVATE_DATA_KEYWORDS = (
    "gmail",
    "email",
    "calendar",
    "drive",
    "my file",
    "my doc",
    "spreadsheet",
    "login",
    "account",
)


class AccessGate(ABC):
    @abstractmethod
    def allows(self, session: ChatSession, text: str) -> bool:
        """Returns True if `text` may be submitted in `session`."""
        pass


class OpenAccessGate(AccessGate):
    """Allows everything. Used when no sign-in flow is configured."""
    def allows(self, session: ChatSession, text: str) -> bool:
        return True


class GuestAccessGate(AccessGate):
    def __init__(self, interaction_limit: int = 3):
        self.interaction_limit = interaction_limit

    def allows(self, session: ChatSession, text: str) -> bool:
        if session.is_authenticated:
            return True
        lowered = text.lower()
        if any(keyword in lowered for keyword in PRIVATE_DATA_KEYWORDS):
            return False
        return session.interaction_count < self.interaction_limit
