"""Pending-action resolver.

There is no state table: the live confirmation state of an action is
reconstructed from the newest outbound message in the room that carries
``metadata.action == <action type>``. The scan window is the last N messages
of the room in either direction, bounded by age and ordered by the store's
``seq``; inbound rows count toward N but are never read as markers.

* a confirmation marker (``promptConfirmation``) is live until its
  ``expiresAt``;
* ``promptPin`` / ``promptSend`` markers carry no expiry and stay live until
  shadowed or until they fall out of the window;
* any other message for the action (cancel, completion, failure) is terminal
  and shadows every older marker, whatever their expiry.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.action_state import WAITING, ActionState
from app.domain.action_types import ActionType
from db.models.message import Message, MessageDirection
from db.repos.messages_repo import list_recent_messages
from db.utils.time import as_utc, to_epoch_ms

_MARKER_FLAGS = (
    ("promptSend", ActionState.AWAITING_EXECUTION),
    ("promptPin", ActionState.AWAITING_SECRET_ENTRY),
    ("promptConfirmation", ActionState.AWAITING_CONFIRMATION),
)
_CONTROL_KEYS = {"action", "promptConfirmation", "promptPin", "promptSend", "expiresAt"}
_SUCCESS_KEYS = ("txHash", "publicKey", "messageId", "zkProofHash")


@dataclass(frozen=True)
class PendingAction:
    action_type: ActionType
    room_id: str
    agent_id: str
    user_id: str | None
    prompt_stage: ActionState
    created_at: datetime
    expires_at: datetime | None
    message_id: uuid.UUID
    parameters: dict[str, Any] = field(default_factory=dict)

    @property
    def expires_at_ms(self) -> int | None:
        return to_epoch_ms(self.expires_at) if self.expires_at else None


def marker_stage(metadata: dict[str, Any]) -> ActionState | None:
    for flag, stage in _MARKER_FLAGS:
        if metadata.get(flag) is True:
            return stage
    return None


def _terminal_state(metadata: dict[str, Any]) -> ActionState:
    if metadata.get("error"):
        return ActionState.FAILED
    if any(metadata.get(key) for key in _SUCCESS_KEYS):
        return ActionState.COMPLETED
    return ActionState.CANCELLED


def _expires_ms(metadata: dict[str, Any]) -> int | None:
    value = metadata.get("expiresAt")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _scan(
    db: Session,
    *,
    room_id: str,
    action_type: ActionType,
    now: datetime,
    lookback_count: int | None,
    lookback_hours: int | None,
) -> tuple[ActionState, Message | None]:
    settings = get_settings()
    rows = list_recent_messages(
        db,
        room_id=room_id,
        now=now,
        limit=lookback_count or settings.PENDING_LOOKBACK_COUNT,
        lookback=timedelta(hours=lookback_hours or settings.PENDING_LOOKBACK_HOURS),
    )
    now_ms = to_epoch_ms(now)
    for row in rows:
        if row.direction != MessageDirection.OUTBOUND.value:
            continue
        metadata = row.meta or {}
        if metadata.get("action") != action_type.value:
            continue
        stage = marker_stage(metadata)
        if stage is None:
            return _terminal_state(metadata), row
        expires_ms = _expires_ms(metadata)
        if expires_ms is not None and expires_ms <= now_ms:
            return ActionState.EXPIRED, row
        return stage, row
    return ActionState.IDLE, None


def find_pending(
    db: Session,
    room_id: str,
    action_type: ActionType,
    now: datetime,
    *,
    lookback_count: int | None = None,
    lookback_hours: int | None = None,
) -> PendingAction | None:
    state, row = _scan(
        db,
        room_id=room_id,
        action_type=action_type,
        now=now,
        lookback_count=lookback_count,
        lookback_hours=lookback_hours,
    )
    if row is None or state not in WAITING:
        return None

    metadata = row.meta or {}
    expires_ms = _expires_ms(metadata)
    return PendingAction(
        action_type=action_type,
        room_id=row.room_id,
        agent_id=row.agent_id,
        user_id=row.user_id,
        prompt_stage=state,
        created_at=as_utc(row.created_at),
        expires_at=(
            datetime.fromtimestamp(expires_ms / 1000, tz=timezone.utc) if expires_ms is not None else None
        ),
        message_id=row.id,
        parameters={k: v for k, v in metadata.items() if k not in _CONTROL_KEYS},
    )


def current_state(
    db: Session,
    room_id: str,
    action_type: ActionType,
    now: datetime,
) -> ActionState:
    state, _ = _scan(
        db,
        room_id=room_id,
        action_type=action_type,
        now=now,
        lookback_count=None,
        lookback_hours=None,
    )
    return state
