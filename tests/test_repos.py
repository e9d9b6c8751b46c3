from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from db.models import MessageDirection
from db.repos.agents_repo import AgentNotFoundError, is_agent_locked, set_agent_locked
from db.repos.emails_repo import add_email, get_email, list_recent_emails
from db.repos.messages_repo import append_message, list_messages_for_room, list_recent_messages
from db.repos.wallets_repo import (
    create_external_wallet_if_not_exists,
    create_wallet_if_not_exists,
    get_wallet_for_agent,
)

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def test_append_assigns_increasing_seq(db):
    first = append_message(db, room_id="r", agent_id="a", direction=MessageDirection.INBOUND, text="one", created_at=T0)
    second = append_message(db, room_id="r", agent_id="a", direction=MessageDirection.OUTBOUND, text="two", created_at=T0)
    assert second.seq > first.seq
    assert first.meta == {}


def test_recent_messages_are_newest_first_and_filtered(db):
    for i in range(3):
        append_message(db, room_id="r", agent_id="a", direction=MessageDirection.OUTBOUND, text=f"m{i}", created_at=T0)
    append_message(db, room_id="r", agent_id="a", direction=MessageDirection.INBOUND, text="in", created_at=T0)
    append_message(db, room_id="other", agent_id="a", direction=MessageDirection.OUTBOUND, text="x", created_at=T0)

    rows = list_recent_messages(
        db,
        room_id="r",
        now=T0,
        limit=10,
        lookback=timedelta(hours=1),
        direction=MessageDirection.OUTBOUND,
    )
    assert [r.text for r in rows] == ["m2", "m1", "m0"]
    assert [m.text for m in list_messages_for_room(db, room_id="r")] == ["m0", "m1", "m2", "in"]


def test_wallet_creation_is_idempotent(db, agent):
    wallet, created = create_wallet_if_not_exists(db, agent_id=agent.id, public_key="0x1", tx_hash="0xa")
    again, created_again = create_wallet_if_not_exists(db, agent_id=agent.id, public_key="0x2", tx_hash="0xb")

    assert created is True
    assert created_again is False
    assert again.id == wallet.id
    assert get_wallet_for_agent(db, agent.id).public_key == "0x1"


def test_external_wallet_creation_is_idempotent(db, agent):
    _, created = create_external_wallet_if_not_exists(db, agent_id=agent.id, public_key="0x1", zk_proof_hash="p")
    _, created_again = create_external_wallet_if_not_exists(db, agent_id=agent.id, public_key="0x2", zk_proof_hash="q")
    assert (created, created_again) == (True, False)


def test_agent_lock_flag(db, agent):
    assert is_agent_locked(db, agent.id) is False
    set_agent_locked(db, agent_id=agent.id, locked=True)
    assert is_agent_locked(db, agent.id) is True

    with pytest.raises(AgentNotFoundError):
        is_agent_locked(db, "missing")
    with pytest.raises(AgentNotFoundError):
        set_agent_locked(db, agent_id="missing", locked=True)


def test_emails_are_scoped_to_agent_and_window(db, agent):
    add_email(db, email_id="e-1", agent_id=agent.id, from_address="a@x.io", body="hi", received_at=T0)
    add_email(
        db,
        email_id="e-0",
        agent_id=agent.id,
        from_address="a@x.io",
        body="old",
        received_at=T0 - timedelta(days=2),
    )

    assert get_email(db, agent_id=agent.id, email_id="e-1").body == "hi"
    assert get_email(db, agent_id="someone-else", email_id="e-1") is None
    assert [e.id for e in list_recent_emails(db, agent_id=agent.id, now=T0)] == ["e-1"]
