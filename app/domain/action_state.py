from __future__ import annotations

from enum import Enum


class ActionState(str, Enum):
    IDLE = "IDLE"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    AWAITING_SECRET_ENTRY = "AWAITING_SECRET_ENTRY"
    AWAITING_EXECUTION = "AWAITING_EXECUTION"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


# states in which a prompt marker is live in the log
WAITING = {
    ActionState.AWAITING_CONFIRMATION,
    ActionState.AWAITING_SECRET_ENTRY,
    ActionState.AWAITING_EXECUTION,
}

# a new flow may start from any of these
RESTARTABLE = {
    ActionState.IDLE,
    ActionState.COMPLETED,
    ActionState.FAILED,
    ActionState.CANCELLED,
    ActionState.EXPIRED,
}

ALLOWED = {
    ActionState.IDLE: {ActionState.AWAITING_CONFIRMATION},
    ActionState.AWAITING_CONFIRMATION: {
        ActionState.AWAITING_CONFIRMATION,
        ActionState.AWAITING_SECRET_ENTRY,
        ActionState.AWAITING_EXECUTION,
        ActionState.CANCELLED,
        ActionState.EXPIRED,
    },
    ActionState.AWAITING_SECRET_ENTRY: {
        ActionState.AWAITING_SECRET_ENTRY,
        ActionState.COMPLETED,
        ActionState.FAILED,
        ActionState.CANCELLED,
        ActionState.EXPIRED,
    },
    ActionState.AWAITING_EXECUTION: {
        ActionState.COMPLETED,
        ActionState.FAILED,
        ActionState.CANCELLED,
        ActionState.EXPIRED,
    },
    ActionState.COMPLETED: set(),
    ActionState.FAILED: set(),
    ActionState.CANCELLED: set(),
    ActionState.EXPIRED: set(),
}


def assert_valid_transition(frm: ActionState, to: ActionState) -> None:
    # terminal states only lead back into a fresh flow
    if frm in RESTARTABLE and frm is not ActionState.IDLE:
        frm = ActionState.IDLE

    if to not in ALLOWED.get(frm, set()):
        raise ValueError(f"Invalid action transition: {frm.value} -> {to.value}")
