from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    seq: int
    room_id: str
    agent_id: str
    user_id: str | None
    direction: str
    text: str
    source: str | None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    created_at: datetime


class MessageListResponse(BaseModel):
    room_id: str
    messages: list[MessageRead]


class PendingActionRead(BaseModel):
    action_type: str
    prompt_stage: str
    message_id: UUID
    created_at: datetime
    expires_at: datetime | None
    parameters: dict[str, Any] = Field(default_factory=dict)


class PendingResponse(BaseModel):
    room_id: str
    action_type: str
    state: str
    pending: PendingActionRead | None = None


class ReportRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agent_id: str = Field(..., min_length=1, max_length=64)
    source: str = Field(..., min_length=1)
    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
