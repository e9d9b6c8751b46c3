from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.actions.base import TurnContext
from app.actions.params import contains_secret, redact_metadata, redact_secrets
from app.actions.queries import check_email, view_wallet
from app.actions.registry import get_handler
from app.chat import composer
from app.chat.contracts import (
    ChatTurnRequest,
    ChatTurnResponse,
    ComposedResponse,
    Intent,
    OutboundMessage,
    SubIntent,
)
from app.chat.intents import classify
from app.chat.room_locks import room_lock
from app.core.context import get_room_id, set_room_id
from app.domain.action_state import ActionState
from app.domain.errors import ActionError, LockedResourceError
from app.services.execution import ExecutionGateway
from app.services.identity import resolve_user_id
from app.services.pending import current_state
from db.models.message import MessageDirection
from db.repos.agents_repo import AgentNotFoundError, get_agent, is_agent_locked
from db.repos.messages_repo import append_message
from db.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

_gateway = ExecutionGateway()

_PIN_WARNING = (
    "Please never type your PIN in the chat. I've hidden it from the conversation. "
    "Enter it only in the secure PIN dialog."
)


def _dispatch(ctx: TurnContext, intent: Intent) -> ComposedResponse:
    if intent.sub_intent == SubIntent.VIEW:
        return view_wallet(ctx)
    if intent.sub_intent == SubIntent.CHECK:
        return check_email(ctx)

    handler = get_handler(intent.action_type)
    if intent.sub_intent == SubIntent.REPORT:
        return _gateway.apply_report(ctx, handler)
    return handler.handle(ctx, intent)


def _state_after_error(db: Session, room_id: str, intent: Intent | None, now: datetime) -> ActionState | None:
    if intent is None or intent.action_type is None:
        return None
    return current_state(db, room_id, intent.action_type, now)


def route_turn(req: ChatTurnRequest, *, db: Session, now: datetime | None = None) -> ChatTurnResponse:
    """
    Handle one inbound turn: append it, classify it, run the matching
    handler and append exactly one outbound reply.

    Raises AgentNotFoundError for an unknown agent; every other failure is
    turned into an appended reply.
    """
    now = now or utcnow()
    room_id = req.room_id or req.agent_id
    previous_room = get_room_id()
    set_room_id(room_id)
    try:
        with room_lock(room_id):
            return _route_locked(req, db=db, room_id=room_id, now=now)
    finally:
        set_room_id(previous_room)


def _route_locked(req: ChatTurnRequest, *, db: Session, room_id: str, now: datetime) -> ChatTurnResponse:
    agent = get_agent(db, req.agent_id)
    if agent is None:
        raise AgentNotFoundError(f"Agent not found: {req.agent_id}")

    has_secret = contains_secret(req.text)
    inbound_text = redact_secrets(req.text) if has_secret else req.text
    append_message(
        db,
        room_id=room_id,
        agent_id=agent.id,
        direction=MessageDirection.INBOUND,
        text=inbound_text,
        user_id=req.user_id,
        source=req.source,
        metadata=redact_metadata(req.metadata),
        created_at=now,
    )
    logger.info("turn received agent_id=%s source=%s", agent.id, req.source)

    intent: Intent | None = None
    user_id: str | None = None
    try:
        if has_secret:
            logger.warning("secret typed into chat, redacted agent_id=%s", agent.id)
            response = composer.plain(_PIN_WARNING, error_code="SECRET_IN_CHAT")
        else:
            intent = classify(req.text, req.metadata, req.source)
            if intent is None:
                response = composer.general()
            else:
                if is_agent_locked(db, agent.id):
                    raise LockedResourceError(agent.id)
                user_id = resolve_user_id(db, agent.created_by_ref)
                ctx = TurnContext(
                    db=db,
                    room_id=room_id,
                    agent=agent,
                    user_id=user_id,
                    text=inbound_text,
                    now=now,
                    source=req.source,
                    metadata=redact_metadata(req.metadata),
                )
                response = _dispatch(ctx, intent)
    except ActionError as e:
        logger.info("turn rejected code=%s: %s", e.code, e)
        source = intent.action_type if intent is not None else None
        response = composer.from_error(e, source=source, state=_state_after_error(db, room_id, intent, now))
    except Exception:
        logger.exception("turn failed agent_id=%s", agent.id)
        db.rollback()
        response = composer.apology(intent.action_type if intent is not None else None)

    metadata = response.metadata.to_wire() if response.metadata is not None else {}
    outbound = append_message(
        db,
        room_id=room_id,
        agent_id=agent.id,
        direction=MessageDirection.OUTBOUND,
        text=response.text,
        user_id=user_id,
        source=response.source,
        metadata=metadata,
        created_at=now,
    )

    return ChatTurnResponse(
        room_id=room_id,
        message=OutboundMessage(
            id=str(outbound.id),
            room_id=room_id,
            text=outbound.text,
            source=outbound.source,
            metadata=metadata,
            created_at=as_utc(outbound.created_at),
        ),
        state=response.state,
        error_code=response.error_code,
        intent=intent,
        suggestions=response.suggestions,
    )
