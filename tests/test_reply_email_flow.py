from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from app.domain.action_state import ActionState
from db.repos.emails_repo import add_email

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def email(db, agent):
    return add_email(
        db,
        email_id="e-1",
        agent_id=agent.id,
        from_address="bob@example.com",
        from_name="Bob",
        subject="Lunch",
        body="Are we still on for noon?",
        received_at=T0 - timedelta(hours=1),
    )


def test_check_email_lists_recent_inbox(say, email, db, agent):
    add_email(
        db,
        email_id="old",
        agent_id=agent.id,
        from_address="carol@example.com",
        body="ancient",
        received_at=T0 - timedelta(days=3),
    )
    resp = say("check email", now=T0)
    assert resp.message.metadata["action"] == "CHECK_EMAIL"
    ids = [e["emailId"] for e in resp.message.metadata["emails"]]
    assert ids == ["e-1"]


def test_reply_flow_uses_send_stage(say, email):
    start = say("reply to emailId: e-1 message: Yes, see you there.", now=T0)
    assert start.state == ActionState.AWAITING_CONFIRMATION
    reply = start.message.metadata["pendingReply"]
    assert reply == {
        "emailId": "e-1",
        "to": "bob@example.com",
        "subject": "Re: Lunch",
        "body": "Yes, see you there.",
    }

    confirm = say("confirm reply", now=T0 + timedelta(minutes=1))
    assert confirm.state == ActionState.AWAITING_EXECUTION
    assert confirm.message.metadata["promptSend"] is True
    assert "promptPin" not in confirm.message.metadata
    assert confirm.message.metadata["pendingReply"]["body"] == "Yes, see you there."

    done = say("", source="REPLY_EMAIL", metadata={"messageId": "m-42"}, now=T0 + timedelta(minutes=2))
    assert done.state == ActionState.COMPLETED
    assert done.message.metadata == {"action": "REPLY_EMAIL", "messageId": "m-42", "emailId": "e-1"}


def test_reply_to_unknown_email(say, email):
    resp = say("reply to emailId: nope message: hi", now=T0)
    assert resp.message.metadata == {}
    assert "couldn't find" in resp.message.text


def test_reply_without_body_and_llm_disabled_reprompts(say, email):
    resp = say("reply to emailId: e-1", now=T0)
    assert resp.error_code == "VALIDATION_ERROR"
    assert "message:" in resp.message.text


def test_reply_without_body_uses_llm_draft(say, email):
    with patch("app.actions.reply_email.draft_email_reply", return_value="Noon works, see you!") as draft:
        resp = say("reply to emailId: e-1", now=T0)
    draft.assert_called_once()
    assert draft.call_args.args[0]["subject"] == "Lunch"
    assert resp.message.metadata["pendingReply"]["body"] == "Noon works, see you!"


def test_draft_email_reply_is_none_when_llm_disabled():
    from app.chat.llm import draft_email_reply

    assert draft_email_reply({"fromAddress": "a@b.c", "body": "hi"}) is None
