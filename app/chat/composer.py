from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from app.chat.contracts import ComposedResponse, MessageMetadata
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType, QueryAction
from app.domain.errors import ActionError
from db.utils.time import to_epoch_ms

_GENERAL_SUGGESTIONS = [
    "create a chipi wallet",
    "view wallet",
    "approve usdc amount: 100",
    "stake usdc amount: 100",
    "check email",
]


def _action_value(action: ActionType | QueryAction | str | None) -> str | None:
    if action is None:
        return None
    return action.value if isinstance(action, (ActionType, QueryAction)) else str(action)


def compose(
    text: str,
    *,
    action: ActionType | QueryAction | str | None = None,
    source: ActionType | QueryAction | str | None = None,
    state: ActionState | None = None,
    error_code: str | None = None,
    suggestions: list[str] | None = None,
    **fields: Any,
) -> ComposedResponse:
    metadata = None
    action_value = _action_value(action)
    if action_value is not None or fields:
        metadata = MessageMetadata(action=action_value, **fields)
    return ComposedResponse(
        text=text,
        source=_action_value(source if source is not None else action),
        metadata=metadata,
        state=state,
        error_code=error_code,
        suggestions=list(suggestions or []),
    )


def plain(
    text: str,
    *,
    source: ActionType | QueryAction | str | None = None,
    state: ActionState | None = None,
    error_code: str | None = None,
) -> ComposedResponse:
    """Text only. Carries no ``action`` metadata so it never affects pending state."""
    return ComposedResponse(
        text=text,
        source=_action_value(source),
        state=state,
        error_code=error_code,
    )


def prompt_confirmation(
    action: ActionType,
    text: str,
    *,
    now: datetime,
    ttl_seconds: int,
    **params: Any,
) -> ComposedResponse:
    return compose(
        text,
        action=action,
        state=ActionState.AWAITING_CONFIRMATION,
        promptConfirmation=True,
        expiresAt=to_epoch_ms(now + timedelta(seconds=ttl_seconds)),
        **params,
    )


def prompt_secret(action: ActionType, text: str, **params: Any) -> ComposedResponse:
    return compose(
        text,
        action=action,
        state=ActionState.AWAITING_SECRET_ENTRY,
        promptPin=True,
        **params,
    )


def prompt_send(action: ActionType, text: str, **params: Any) -> ComposedResponse:
    return compose(
        text,
        action=action,
        state=ActionState.AWAITING_EXECUTION,
        promptSend=True,
        **params,
    )


def terminal(action: ActionType, text: str, *, state: ActionState, **fields: Any) -> ComposedResponse:
    return compose(text, action=action, state=state, **fields)


def from_error(
    err: ActionError,
    *,
    source: ActionType | str | None = None,
    state: ActionState | None = None,
) -> ComposedResponse:
    return plain(err.user_message, source=source, state=state, error_code=err.code)


def general() -> ComposedResponse:
    return ComposedResponse(
        text=(
            "Hi! I can create a wallet, approve or stake USDC, connect an external wallet, "
            "and check or reply to your emails. What would you like to do?"
        ),
        suggestions=list(_GENERAL_SUGGESTIONS),
    )


def apology(source: ActionType | str | None = None) -> ComposedResponse:
    return plain(
        "Sorry, something went wrong while processing your request. Please try again later.",
        source=source,
        error_code="INTERNAL_ERROR",
    )
