"""
Run Outcomes - Orchestrator Result Definitions

Type definitions describing how a single submission to the TaskOrchestrator
ended. Used by the orchestrator (to report) and the ChatService (to map
rejections onto service errors).
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Literal, Optional

from ...state.models import Message, Plan


class RunOutcome(Enum):
    """
    Terminal classification of one run. Every outcome except REJECTED leaves
    the orchestrator back in IDLE after having appended at least one message.
    """

    REJECTED = auto()  # Entry conditions not met; nothing was published.
    CHAT = auto()  # Conversational reply streamed into a single message.
    SUMMARY = auto()  # Plan executed, inline summary produced.
    FILE = auto()  # Plan executed, file or archive artifact produced.
    TERMINATED = auto()  # Stopped by the user at a suspend point.


RejectionReason = Literal["busy", "empty", "denied"]


@dataclass
class RunResult:
    """
    What a run produced, in publication order.
    """

    outcome: RunOutcome
    messages: List[Message] = field(default_factory=list)
    plan: Optional[Plan] = None
    rejection: Optional[RejectionReason] = None
