from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.schemas.agents import (
    AgentWalletResponse,
    ExternalWalletRead,
    LockRequest,
    LockResponse,
    WalletRead,
)
from db.deps import get_db
from db.repos.agents_repo import AgentNotFoundError, get_agent, set_agent_locked
from db.repos.wallets_repo import get_external_wallet_for_agent, get_wallet_for_agent

router = APIRouter(prefix="/agents", tags=["agents"])
logger = logging.getLogger(__name__)


@router.get("/{agent_id}/wallet", response_model=AgentWalletResponse)
def get_agent_wallet(agent_id: str, db: Session = Depends(get_db)) -> AgentWalletResponse:
    if get_agent(db, agent_id) is None:
        raise HTTPException(status_code=404, detail=f"Agent not found: {agent_id}")

    wallet = get_wallet_for_agent(db, agent_id)
    external = get_external_wallet_for_agent(db, agent_id)
    return AgentWalletResponse(
        agent_id=agent_id,
        wallet=WalletRead.model_validate(wallet) if wallet else None,
        external_wallet=ExternalWalletRead.model_validate(external) if external else None,
    )


@router.put("/{agent_id}/lock", response_model=LockResponse)
def put_agent_lock(agent_id: str, payload: LockRequest, db: Session = Depends(get_db)) -> LockResponse:
    try:
        agent = set_agent_locked(db, agent_id=agent_id, locked=payload.locked)
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    logger.info("agent lock changed agent_id=%s locked=%s", agent_id, agent.is_locked)
    return LockResponse(agent_id=agent.id, locked=agent.is_locked)
