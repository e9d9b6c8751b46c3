from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agent_id: str
    public_key: str
    tx_hash: str
    created_at: datetime


class ExternalWalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agent_id: str
    public_key: str
    zk_proof_hash: str
    runes_verified: bool
    created_at: datetime


class AgentWalletResponse(BaseModel):
    agent_id: str
    wallet: WalletRead | None = None
    external_wallet: ExternalWalletRead | None = None


class LockRequest(BaseModel):
    locked: bool


class LockResponse(BaseModel):
    agent_id: str
    locked: bool
