from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.message import Message, MessageDirection
from db.utils.time import utcnow


def append_message(
    db: Session,
    *,
    room_id: str,
    agent_id: str,
    direction: MessageDirection,
    text: str,
    user_id: str | None = None,
    source: str | None = None,
    metadata: dict[str, Any] | None = None,
    created_at: datetime | None = None,
) -> Message:
    message = Message(
        room_id=room_id,
        agent_id=agent_id,
        user_id=user_id,
        direction=direction.value,
        text=text or "",
        source=source,
        meta=dict(metadata or {}),
        created_at=created_at or utcnow(),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def list_recent_messages(
    db: Session,
    *,
    room_id: str,
    now: datetime,
    limit: int,
    lookback: timedelta,
    direction: MessageDirection | None = None,
) -> list[Message]:
    """
    Newest-first window over a room's log: at most ``limit`` rows created
    no earlier than ``now - lookback``.
    """
    stmt = (
        select(Message)
        .where(Message.room_id == room_id)
        .where(Message.created_at >= now - lookback)
    )
    if direction is not None:
        stmt = stmt.where(Message.direction == direction.value)
    stmt = stmt.order_by(Message.seq.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_messages_for_room(
    db: Session,
    *,
    room_id: str,
    limit: int = 200,
) -> list[Message]:
    stmt = (
        select(Message)
        .where(Message.room_id == room_id)
        .order_by(Message.seq.desc())
        .limit(limit)
    )
    rows = list(db.execute(stmt).scalars().all())
    rows.reverse()
    return rows
