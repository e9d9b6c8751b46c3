from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy.orm import Session

from app.chat import composer
from app.chat.contracts import ComposedResponse, Intent, SubIntent
from app.config import get_settings
from app.domain.action_state import ActionState, assert_valid_transition
from app.domain.action_types import ActionType
from app.domain.errors import StateNotFoundError
from app.services.pending import PendingAction, find_pending
from db.models.agent import Agent

logger = logging.getLogger(__name__)


@dataclass
class TurnContext:
    db: Session
    room_id: str
    agent: Agent
    user_id: str
    text: str
    now: datetime
    source: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ActionHandler:
    """
    Confirmation state machine shared by every action type.

    Subclasses describe the action (phrases, success fields, parameters,
    guards) and the terminal side effect; the transitions live here.
    """

    action_type: ClassVar[ActionType]
    label: ClassVar[str]
    start_phrase: ClassVar[str]
    confirm_phrase: ClassVar[str]
    cancel_phrase: ClassVar[str]
    requires_secret: ClassVar[bool] = True
    success_fields: ClassVar[tuple[str, ...]] = ("txHash",)

    # -- hooks ---------------------------------------------------------------

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        """Return a response to short-circuit start/confirm, or None to proceed."""
        return None

    def extract_parameters(self, ctx: TurnContext) -> dict[str, Any]:
        return {}

    def confirmation_text(self, params: dict[str, Any]) -> str:
        raise NotImplementedError

    def secret_text(self, pending: PendingAction) -> str:
        return f"Please enter your 4-digit PIN in the secure dialog to complete the {self.label}."

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        raise NotImplementedError

    def failure_text(self, error: str) -> str:
        return f"Sorry, the {self.label} failed: {error}. You can try again by saying '{self.start_phrase}'."

    # -- transitions ---------------------------------------------------------

    def handle(self, ctx: TurnContext, intent: Intent) -> ComposedResponse:
        if intent.sub_intent == SubIntent.CONFIRM:
            return self.confirm(ctx)
        if intent.sub_intent == SubIntent.CANCEL:
            return self.cancel(ctx)
        return self.start(ctx)

    def pending(self, ctx: TurnContext) -> PendingAction | None:
        return find_pending(ctx.db, ctx.room_id, self.action_type, ctx.now)

    def start(self, ctx: TurnContext) -> ComposedResponse:
        guarded = self.check_guard(ctx)
        if guarded is not None:
            return guarded

        pending = self.pending(ctx)
        if pending is not None and pending.prompt_stage != ActionState.AWAITING_CONFIRMATION:
            return composer.plain(
                f"A {self.label} is already waiting for you to finish in the secure dialog. "
                f"Finish it there or say '{self.cancel_phrase}'.",
                source=self.action_type,
                state=pending.prompt_stage,
            )

        params = self.extract_parameters(ctx)

        frm = pending.prompt_stage if pending else ActionState.IDLE
        assert_valid_transition(frm, ActionState.AWAITING_CONFIRMATION)

        logger.info("%s: prompting confirmation room_id=%s", self.action_type.value, ctx.room_id)
        return composer.prompt_confirmation(
            self.action_type,
            self.confirmation_text(params),
            now=ctx.now,
            ttl_seconds=get_settings().prompt_ttl_seconds,
            **params,
        )

    def confirm(self, ctx: TurnContext) -> ComposedResponse:
        guarded = self.check_guard(ctx)
        if guarded is not None:
            return guarded

        pending = self.pending(ctx)
        if pending is None:
            raise StateNotFoundError(
                f"no live {self.action_type.value} prompt in room {ctx.room_id}",
                user_message=(
                    f"No pending {self.label} found. Please say '{self.start_phrase}' to start the process."
                ),
            )

        next_stage = (
            ActionState.AWAITING_SECRET_ENTRY if self.requires_secret else ActionState.AWAITING_EXECUTION
        )
        # past confirmation the marker carries no expiry: the client may
        # already have executed, so its report must still land
        if pending.prompt_stage == ActionState.AWAITING_CONFIRMATION:
            assert_valid_transition(pending.prompt_stage, next_stage)

        logger.info(
            "%s: confirmed room_id=%s stage=%s",
            self.action_type.value,
            ctx.room_id,
            next_stage.value,
        )
        if self.requires_secret:
            return composer.prompt_secret(self.action_type, self.secret_text(pending), **pending.parameters)
        return composer.prompt_send(self.action_type, self.secret_text(pending), **pending.parameters)

    def cancel(self, ctx: TurnContext) -> ComposedResponse:
        pending = self.pending(ctx)
        if pending is None:
            return composer.plain(
                f"There's no pending {self.label} to cancel.",
                source=self.action_type,
                state=ActionState.IDLE,
            )

        assert_valid_transition(pending.prompt_stage, ActionState.CANCELLED)
        logger.info("%s: cancelled room_id=%s", self.action_type.value, ctx.room_id)
        return composer.terminal(
            self.action_type,
            f"{self.label[0].upper()}{self.label[1:]} cancelled. "
            f"You can start again later by saying '{self.start_phrase}'.",
            state=ActionState.CANCELLED,
        )

    def fail(self, ctx: TurnContext, pending: PendingAction, error: str) -> ComposedResponse:
        assert_valid_transition(pending.prompt_stage, ActionState.FAILED)
        logger.warning("%s: execution failed room_id=%s error=%s", self.action_type.value, ctx.room_id, error)
        return composer.terminal(
            self.action_type,
            self.failure_text(error),
            state=ActionState.FAILED,
            error=error,
        )
