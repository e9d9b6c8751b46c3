from __future__ import annotations

import logging
from typing import Any

from app.actions.base import ActionHandler, TurnContext
from app.actions.params import extract_email_id, extract_reply_body
from app.chat import composer
from app.chat.contracts import ComposedResponse
from app.chat.llm import draft_email_reply
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.domain.errors import ValidationError
from app.services.pending import PendingAction
from db.repos.emails_repo import get_email

logger = logging.getLogger(__name__)


def _reply_subject(subject: str | None) -> str:
    subject = subject or ""
    return subject if subject.lower().startswith("re:") else f"Re: {subject}".strip()


class ReplyEmailHandler(ActionHandler):
    """
    Email replies need no secret: after confirmation the client sends the
    reply itself (``promptSend``) and reports back the provider message id.
    """

    action_type = ActionType.REPLY_EMAIL
    label = "email reply"
    start_phrase = "reply to emailId: <id>"
    confirm_phrase = "confirm reply"
    cancel_phrase = "cancel reply"
    requires_secret = False
    success_fields = ("messageId",)

    def _email_id(self, ctx: TurnContext) -> str | None:
        pending_reply = ctx.metadata.get("pendingReply")
        if isinstance(pending_reply, dict) and pending_reply.get("emailId"):
            return str(pending_reply["emailId"])
        return extract_email_id(ctx.text)

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        email_id = self._email_id(ctx)
        if email_id is None or get_email(ctx.db, agent_id=ctx.agent.id, email_id=email_id) is not None:
            return None
        return composer.plain(
            f"I couldn't find an email with id {email_id} in your inbox. Say 'check email' to list recent ones.",
            source=self.action_type,
            state=ActionState.IDLE,
        )

    def extract_parameters(self, ctx: TurnContext) -> dict[str, Any]:
        email_id = self._email_id(ctx)
        if email_id is None:
            raise ValidationError(
                "emailId missing",
                user_message="Which email should I reply to? Say e.g. 'reply to emailId: <id>'.",
            )
        email = get_email(ctx.db, agent_id=ctx.agent.id, email_id=email_id)

        pending_reply = ctx.metadata.get("pendingReply")
        body = extract_reply_body(ctx.text)
        if body is None and isinstance(pending_reply, dict):
            body = (pending_reply.get("body") or "").strip() or None
        if body is None:
            body = draft_email_reply(
                {
                    "fromAddress": email.from_address,
                    "fromName": email.from_name,
                    "subject": email.subject,
                    "body": email.body,
                }
            )
        if body is None:
            raise ValidationError(
                "reply body missing",
                user_message="What should the reply say? Add it as 'message: <your reply>'.",
            )

        return {
            "emailId": email_id,
            "pendingReply": {
                "emailId": email_id,
                "to": email.from_address,
                "subject": _reply_subject(email.subject),
                "body": body,
            },
        }

    def confirmation_text(self, params: dict[str, Any]) -> str:
        reply = params["pendingReply"]
        return (
            f"Here's the reply to {reply['to']}:\n\n{reply['body']}\n\n"
            f"Say '{self.confirm_phrase}' to send it or '{self.cancel_phrase}' to discard it."
        )

    def secret_text(self, pending: PendingAction) -> str:
        return "Sending your reply now."

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        return composer.terminal(
            self.action_type,
            f"Your reply was sent (message id: {report['messageId']}).",
            state=ActionState.COMPLETED,
            messageId=report["messageId"],
            emailId=pending.parameters.get("emailId"),
        )
