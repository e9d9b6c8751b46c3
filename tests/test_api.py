from __future__ import annotations


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_chat_turn_unknown_agent_is_404(client):
    resp = client.post("/v1/chat/turn", json={"agent_id": "ghost", "text": "hi"})
    assert resp.status_code == 404


def test_chat_turn_rejects_unknown_fields(client, agent):
    resp = client.post("/v1/chat/turn", json={"agent_id": agent.id, "text": "hi", "bogus": 1})
    assert resp.status_code == 422


def test_create_wallet_over_http(client, agent):
    start = client.post("/v1/chat/turn", json={"agent_id": agent.id, "text": "create a chipi wallet"})
    assert start.status_code == 200
    body = start.json()
    assert body["room_id"] == agent.id
    assert body["state"] == "AWAITING_CONFIRMATION"
    assert body["message"]["metadata"]["promptConfirmation"] is True
    assert body["intent"]["action_type"] == "CREATE_WALLET"

    confirm = client.post(
        "/v1/chat/turn",
        json={"agent_id": agent.id, "text": "confirm chipi wallet creation"},
    )
    assert confirm.json()["message"]["metadata"]["promptPin"] is True

    pending = client.get(f"/v1/rooms/{agent.id}/pending/CREATE_WALLET")
    assert pending.status_code == 200
    assert pending.json()["state"] == "AWAITING_SECRET_ENTRY"
    assert pending.json()["pending"]["prompt_stage"] == "AWAITING_SECRET_ENTRY"

    report = client.post(
        f"/v1/rooms/{agent.id}/reports",
        json={"agent_id": agent.id, "source": "CREATE_WALLET", "metadata": {"txHash": "0xabc", "publicKey": "0xdef"}},
    )
    assert report.status_code == 200
    assert report.json()["state"] == "COMPLETED"
    assert report.json()["message"]["metadata"] == {
        "action": "CREATE_WALLET",
        "txHash": "0xabc",
        "publicKey": "0xdef",
    }

    wallet = client.get(f"/v1/agents/{agent.id}/wallet")
    assert wallet.status_code == 200
    assert wallet.json()["wallet"]["public_key"] == "0xdef"
    assert wallet.json()["external_wallet"] is None

    messages = client.get(f"/v1/rooms/{agent.id}/messages")
    assert messages.status_code == 200
    rows = messages.json()["messages"]
    assert len(rows) == 6
    assert [r["direction"] for r in rows[:2]] == ["inbound", "outbound"]
    assert rows[-1]["metadata"]["txHash"] == "0xabc"


def test_pending_endpoint_validates_action_type(client, agent):
    resp = client.get(f"/v1/rooms/{agent.id}/pending/NOT_A_THING")
    assert resp.status_code == 422

    idle = client.get(f"/v1/rooms/{agent.id}/pending/stake_usdc")
    assert idle.status_code == 200
    assert idle.json()["state"] == "IDLE"
    assert idle.json()["pending"] is None


def test_report_endpoint_rejects_unknown_source(client, agent):
    resp = client.post(f"/v1/rooms/{agent.id}/reports", json={"agent_id": agent.id, "source": "MINT_NFT"})
    assert resp.status_code == 422


def test_lock_endpoint(client, agent):
    resp = client.put(f"/v1/agents/{agent.id}/lock", json={"locked": True})
    assert resp.status_code == 200
    assert resp.json() == {"agent_id": agent.id, "locked": True}

    turn = client.post("/v1/chat/turn", json={"agent_id": agent.id, "text": "create a chipi wallet"})
    assert turn.json()["error_code"] == "AGENT_LOCKED"

    missing = client.put("/v1/agents/ghost/lock", json={"locked": True})
    assert missing.status_code == 404


def test_wallet_endpoint_unknown_agent(client):
    assert client.get("/v1/agents/ghost/wallet").status_code == 404
