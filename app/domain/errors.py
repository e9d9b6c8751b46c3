"""Error taxonomy for the confirmation engine.

Every error carries a stable ``code`` and a message that is safe to show in
chat. Handlers raise them; the turn router turns them into an appended
response message so the log stays a complete audit trail.
"""
from __future__ import annotations


class ActionError(Exception):
    code = "ACTION_ERROR"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class ValidationError(ActionError):
    """Malformed amount, PIN or address. The user is re-prompted."""

    code = "VALIDATION_ERROR"


class StateNotFoundError(ActionError):
    """Confirm, secret entry or report with no live pending action."""

    code = "STATE_NOT_FOUND"


class IdentityResolutionError(ActionError):
    code = "IDENTITY_RESOLUTION_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            user_message="Sorry, I couldn't verify who owns this assistant. Please try again later.",
        )


class TransientExecutionError(ActionError):
    """Network, timeout or rate-limit failure inside the execution boundary."""

    code = "TRANSIENT_EXECUTION_ERROR"


class LockedResourceError(ActionError):
    code = "AGENT_LOCKED"

    def __init__(self, agent_id: str) -> None:
        super().__init__(
            f"Agent is locked: {agent_id}",
            user_message="This assistant is currently locked, so I can't perform that action right now.",
        )


class DuplicateSubmissionError(ActionError):
    """A second terminal report for a prompt that already produced one."""

    code = "DUPLICATE_SUBMISSION"
