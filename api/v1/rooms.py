from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.schemas.rooms import (
    MessageListResponse,
    MessageRead,
    PendingActionRead,
    PendingResponse,
    ReportRequest,
)
from app.chat.contracts import ChatTurnRequest, ChatTurnResponse
from app.chat.router import route_turn
from app.domain.action_types import ActionType
from app.services.pending import current_state, find_pending
from db.deps import get_db
from db.repos.agents_repo import AgentNotFoundError
from db.repos.messages_repo import list_messages_for_room
from db.utils.time import utcnow

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _parse_action_type(value: str) -> ActionType:
    action_type = ActionType.parse(value)
    if action_type is None:
        raise HTTPException(status_code=422, detail=f"Unknown action type: {value}")
    return action_type


@router.get("/{room_id}/messages", response_model=MessageListResponse)
def list_room_messages(
    room_id: str,
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> MessageListResponse:
    rows = list_messages_for_room(db, room_id=room_id, limit=limit)
    return MessageListResponse(
        room_id=room_id,
        messages=[MessageRead.model_validate(row) for row in rows],
    )


@router.get("/{room_id}/pending/{action_type}", response_model=PendingResponse)
def get_pending_action(room_id: str, action_type: str, db: Session = Depends(get_db)) -> PendingResponse:
    parsed = _parse_action_type(action_type)
    now = utcnow()
    pending = find_pending(db, room_id, parsed, now)
    return PendingResponse(
        room_id=room_id,
        action_type=parsed.value,
        state=current_state(db, room_id, parsed, now).value,
        pending=(
            PendingActionRead(
                action_type=pending.action_type.value,
                prompt_stage=pending.prompt_stage.value,
                message_id=pending.message_id,
                created_at=pending.created_at,
                expires_at=pending.expires_at,
                parameters=pending.parameters,
            )
            if pending
            else None
        ),
    )


@router.post("/{room_id}/reports", response_model=ChatTurnResponse)
def post_execution_report(
    room_id: str,
    payload: ReportRequest,
    db: Session = Depends(get_db),
) -> ChatTurnResponse:
    _parse_action_type(payload.source)
    req = ChatTurnRequest(
        agent_id=payload.agent_id,
        room_id=room_id,
        text=payload.text,
        source=payload.source,
        metadata=payload.metadata,
    )
    try:
        return route_turn(req, db=db)
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
