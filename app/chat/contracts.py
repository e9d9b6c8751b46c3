from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.action_state import ActionState
from app.domain.action_types import ActionType


class Domain(str, Enum):
    WALLET = "wallet"
    EMAIL = "email"
    EXTERNAL_WALLET = "external_wallet"


class SubIntent(str, Enum):
    CREATE = "create"
    VIEW = "view"
    APPROVE = "approve"
    STAKE = "stake"
    CHECK = "check"
    REPLY = "reply"
    CONNECT = "connect"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    REPORT = "report"


class Intent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    domain: Domain
    sub_intent: SubIntent
    action_type: ActionType | None = None


class WalletEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    walletId: str
    address: str | None = None
    status: str | None = None
    details: str | None = None


class EmailEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    emailId: str
    fromAddress: str
    fromName: str | None = None
    subject: str | None = None
    date: str | None = None
    body: str | None = None


class PendingReply(BaseModel):
    model_config = ConfigDict(extra="forbid")

    emailId: str
    to: str | None = None
    subject: str | None = None
    body: str


class MessageMetadata(BaseModel):
    """
    Closed vocabulary the presentation boundary renders from.
    Unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    action: str | None = None
    promptConfirmation: bool | None = None
    promptPin: bool | None = None
    promptSend: bool | None = None
    pendingReply: PendingReply | None = None
    wallets: list[WalletEntry] | None = None
    emails: list[EmailEntry] | None = None
    emailId: str | None = None
    messageId: str | None = None
    txHash: str | None = None
    publicKey: str | None = None
    amount: str | None = None
    contractAddress: str | None = None
    spender: str | None = None
    recipient: str | None = None
    zkProofHash: str | None = None
    runesVerified: bool | None = None
    error: str | None = None
    expiresAt: int | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ChatTurnRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agent_id: str = Field(min_length=1, max_length=64)
    room_id: str | None = Field(default=None, max_length=64)
    user_id: str | None = Field(default=None, max_length=64)
    text: str = ""
    source: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    attachments: list[dict[str, Any]] = Field(default_factory=list)


class ComposedResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    source: str | None = None
    metadata: MessageMetadata | None = None
    state: ActionState | None = None
    error_code: str | None = None
    suggestions: list[str] = Field(default_factory=list)


class OutboundMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    room_id: str
    text: str
    source: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ChatTurnResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: str
    message: OutboundMessage
    state: ActionState | None = None
    error_code: str | None = None
    intent: Intent | None = None
    suggestions: list[str] = Field(default_factory=list)
