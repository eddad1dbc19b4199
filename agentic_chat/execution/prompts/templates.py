"""
Prompt template names, one per LLM call the core makes.
"""

from typing import List


class Template:
    """Use these instead of raw strings."""

    # Chat path
    CHAT_REPLY = "chat_reply"
    INTENT_CLASSIFICATION = "intent_classification"

    # Task path
    TASK_ACKNOWLEDGMENT = "task_acknowledgment"
    PLAN_SYNTHESIS = "plan_synthesis"
    STEP_EXECUTION = "step_execution"
    STEP_LOGS = "step_logs"

    # Finalization
    FILE_CONTENT = "file_content"
    ARCHIVE_MANIFEST = "archive_manifest"
    FINAL_SUMMARY = "final_summary"

    @classmethod
    def names(cls) -> List[str]:
        return [
            value for key, value in vars(cls).items()
            if key.isupper() and isinstance(value, str)
        ]
