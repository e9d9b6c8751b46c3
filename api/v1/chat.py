from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.chat.contracts import ChatTurnRequest, ChatTurnResponse
from app.chat.router import route_turn
from db.deps import get_db
from db.repos.agents_repo import AgentNotFoundError

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/turn", response_model=ChatTurnResponse)
def chat_turn(req: ChatTurnRequest, db: Session = Depends(get_db)) -> ChatTurnResponse:
    try:
        return route_turn(req, db=db)
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
