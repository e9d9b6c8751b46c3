from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.services.pending import current_state, find_pending
from db.models import Wallet
from db.repos.messages_repo import list_messages_for_room
from db.repos.wallets_repo import create_wallet_if_not_exists, get_wallet_for_agent

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
ROOM = "agent-1"


def _report(say, now, **metadata):
    return say("", source="CREATE_WALLET", metadata=metadata, now=now)


def test_create_wallet_end_to_end(say, db):
    start = say("create a chipi wallet", now=T0)
    assert start.state == ActionState.AWAITING_CONFIRMATION
    assert start.message.metadata["action"] == "CREATE_WALLET"
    assert start.message.metadata["promptConfirmation"] is True
    assert start.message.metadata["expiresAt"] == int((T0 + timedelta(hours=24)).timestamp() * 1000)

    confirm = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=1))
    assert confirm.state == ActionState.AWAITING_SECRET_ENTRY
    assert confirm.message.metadata["action"] == "CREATE_WALLET"
    assert confirm.message.metadata["promptPin"] is True
    assert "promptConfirmation" not in confirm.message.metadata

    done = _report(say, T0 + timedelta(minutes=2), txHash="0xabc", publicKey="0xdef")
    assert done.state == ActionState.COMPLETED
    assert "0xabc" in done.message.text
    assert "0xdef" in done.message.text
    assert done.message.metadata == {"action": "CREATE_WALLET", "txHash": "0xabc", "publicKey": "0xdef"}

    wallet = get_wallet_for_agent(db, "agent-1")
    assert wallet is not None
    assert wallet.public_key == "0xdef"
    assert current_state(db, ROOM, ActionType.CREATE_WALLET, T0 + timedelta(minutes=3)) == ActionState.COMPLETED

    # inbound + outbound for each of the three turns
    assert len(list_messages_for_room(db, room_id=ROOM)) == 6


def test_cancel_then_confirm_has_no_pending_state(say):
    say("create a chipi wallet", now=T0)
    cancelled = say("cancel chipi wallet creation", now=T0 + timedelta(minutes=1))
    assert cancelled.state == ActionState.CANCELLED
    assert cancelled.message.metadata == {"action": "CREATE_WALLET"}

    late = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=2))
    assert late.error_code == "STATE_NOT_FOUND"
    assert late.state == ActionState.CANCELLED
    assert late.message.metadata == {}
    assert "create a chipi wallet" in late.message.text


def test_cancel_during_pin_entry_rejects_later_confirm_and_report(say, db):
    say("create a chipi wallet", now=T0)
    say("confirm chipi wallet creation", now=T0 + timedelta(minutes=1))

    cancelled = say("cancel chipi wallet creation", now=T0 + timedelta(minutes=2))
    assert cancelled.state == ActionState.CANCELLED
    assert cancelled.message.metadata == {"action": "CREATE_WALLET"}

    confirm = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=3))
    assert confirm.error_code == "STATE_NOT_FOUND"
    assert confirm.message.metadata == {}

    report = _report(say, T0 + timedelta(minutes=4), txHash="0xabc", publicKey="0xdef")
    assert report.error_code == "STATE_NOT_FOUND"
    assert report.state == ActionState.CANCELLED
    assert get_wallet_for_agent(db, "agent-1") is None
    assert db.query(Wallet).count() == 0


def test_confirm_after_prompt_expiry_is_rejected(say, db):
    say("create a chipi wallet", now=T0)
    late = say("confirm chipi wallet creation", now=T0 + timedelta(hours=24, minutes=1))
    assert late.error_code == "STATE_NOT_FOUND"
    assert late.message.metadata == {}


def test_late_report_after_pin_prompt_still_records_wallet(say, db):
    say("create a chipi wallet", now=T0)
    confirm = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=1))
    assert "expiresAt" not in confirm.message.metadata

    later = T0 + timedelta(minutes=17)
    assert current_state(db, ROOM, ActionType.CREATE_WALLET, later) == ActionState.AWAITING_SECRET_ENTRY
    done = _report(say, later, txHash="0xabc", publicKey="0xdef")
    assert done.state == ActionState.COMPLETED
    assert get_wallet_for_agent(db, "agent-1").public_key == "0xdef"

    again = say("create a chipi wallet", now=T0 + timedelta(minutes=18))
    assert again.state == ActionState.IDLE
    assert again.message.metadata == {}
    assert "0xdef" in again.message.text


def test_existing_wallet_blocks_a_new_prompt(say, db, agent):
    create_wallet_if_not_exists(db, agent_id=agent.id, public_key="0xold", tx_hash="0x1")

    resp = say("create a chipi wallet", now=T0)
    assert resp.message.metadata == {}
    assert resp.state == ActionState.IDLE
    assert "0xold" in resp.message.text
    assert find_pending(db, ROOM, ActionType.CREATE_WALLET, T0) is None


def test_partial_report_keeps_secret_entry_open(say, db):
    say("create a chipi wallet", now=T0)
    say("confirm chipi wallet creation", now=T0)

    partial = _report(say, T0 + timedelta(minutes=1), txHash="0xabc")
    assert partial.error_code == "VALIDATION_ERROR"
    assert partial.state == ActionState.AWAITING_SECRET_ENTRY
    assert partial.message.metadata == {}
    assert "publicKey" in partial.message.text

    done = _report(say, T0 + timedelta(minutes=2), txHash="0xabc", publicKey="0xdef")
    assert done.state == ActionState.COMPLETED


def test_duplicate_report_does_not_create_a_second_record(say, db):
    say("create a chipi wallet", now=T0)
    say("confirm chipi wallet creation", now=T0)
    first = _report(say, T0 + timedelta(minutes=1), txHash="0xabc", publicKey="0xdef")
    second = _report(say, T0 + timedelta(minutes=2), txHash="0xabc", publicKey="0xdef")

    assert first.state == ActionState.COMPLETED
    assert second.error_code == "STATE_NOT_FOUND"
    assert db.query(Wallet).count() == 1

    completions = [
        m for m in list_messages_for_room(db, room_id=ROOM)
        if m.direction == "outbound" and (m.meta or {}).get("txHash")
    ]
    assert len(completions) == 1


def test_failure_report_ends_in_failed(say, db):
    say("create a chipi wallet", now=T0)
    say("confirm chipi wallet creation", now=T0)

    failed = _report(say, T0 + timedelta(minutes=1), error="rpc unavailable")
    assert failed.state == ActionState.FAILED
    assert failed.message.metadata == {"action": "CREATE_WALLET", "error": "rpc unavailable"}
    assert current_state(db, ROOM, ActionType.CREATE_WALLET, T0 + timedelta(minutes=2)) == ActionState.FAILED

    again = say("create a chipi wallet", now=T0 + timedelta(minutes=3))
    assert again.state == ActionState.AWAITING_CONFIRMATION


def test_cancel_with_nothing_pending_is_graceful(say):
    resp = say("cancel chipi wallet creation", now=T0)
    assert resp.error_code is None
    assert resp.message.metadata == {}
    assert "no pending" in resp.message.text.lower()


def test_reconfirm_reopens_the_same_pin_prompt(say):
    say("create a chipi wallet", now=T0)
    first = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=1))
    second = say("confirm chipi wallet creation", now=T0 + timedelta(minutes=5))

    assert second.state == ActionState.AWAITING_SECRET_ENTRY
    assert second.message.metadata["promptPin"] is True
    assert second.message.metadata == first.message.metadata


def test_start_during_secret_entry_does_not_open_a_second_prompt(say, db):
    say("create a chipi wallet", now=T0)
    say("confirm chipi wallet creation", now=T0)

    resp = say("create a chipi wallet", now=T0 + timedelta(minutes=1))
    assert resp.message.metadata == {}
    assert resp.state == ActionState.AWAITING_SECRET_ENTRY

    pending = find_pending(db, ROOM, ActionType.CREATE_WALLET, T0 + timedelta(minutes=1))
    assert pending.prompt_stage == ActionState.AWAITING_SECRET_ENTRY


def test_restart_supersedes_earlier_confirmation_prompt(say, db):
    first = say("create a chipi wallet", now=T0)
    second = say("create a chipi wallet", now=T0 + timedelta(minutes=1))

    pending = find_pending(db, ROOM, ActionType.CREATE_WALLET, T0 + timedelta(minutes=2))
    assert str(pending.message_id) == second.message.id
    assert str(pending.message_id) != first.message.id
