from __future__ import annotations

from typing import Any

from app.actions.base import ActionHandler, TurnContext
from app.chat import composer
from app.chat.contracts import ComposedResponse
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.services.pending import PendingAction
from db.repos.wallets_repo import (
    create_external_wallet_if_not_exists,
    get_external_wallet_for_agent,
)


class ConnectExternalWalletHandler(ActionHandler):
    action_type = ActionType.CONNECT_EXTERNAL_WALLET
    label = "Starknet wallet connection"
    start_phrase = "connect starknet"
    confirm_phrase = "confirm starknet connection"
    cancel_phrase = "cancel starknet connection"
    success_fields = ("publicKey", "zkProofHash")

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        existing = get_external_wallet_for_agent(ctx.db, ctx.agent.id)
        if existing is None:
            return None
        return composer.plain(
            f"A Starknet wallet is already connected ({existing.public_key}).",
            source=self.action_type,
            state=ActionState.IDLE,
        )

    def confirmation_text(self, params: dict[str, Any]) -> str:
        return (
            "I'm about to connect your Starknet wallet and verify your Runes ownership. "
            f"Say '{self.confirm_phrase}' to continue or '{self.cancel_phrase}' to abort."
        )

    def secret_text(self, pending: PendingAction) -> str:
        return "Please enter your 4-digit PIN in the secure dialog to sign the connection proof."

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        runes_verified = bool(report.get("runesVerified", False))
        create_external_wallet_if_not_exists(
            ctx.db,
            agent_id=ctx.agent.id,
            public_key=report["publicKey"],
            zk_proof_hash=report["zkProofHash"],
            runes_verified=runes_verified,
        )
        return composer.terminal(
            self.action_type,
            f"Your Starknet wallet {report['publicKey']} is connected."
            + (" Runes ownership verified." if runes_verified else ""),
            state=ActionState.COMPLETED,
            publicKey=report["publicKey"],
            zkProofHash=report["zkProofHash"],
            runesVerified=runes_verified,
        )
