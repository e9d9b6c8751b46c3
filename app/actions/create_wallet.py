from __future__ import annotations

import logging
from typing import Any

from app.actions.base import ActionHandler, TurnContext
from app.chat import composer
from app.chat.contracts import ComposedResponse
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.services.pending import PendingAction
from db.repos.wallets_repo import create_wallet_if_not_exists, get_wallet_for_agent

logger = logging.getLogger(__name__)


class CreateWalletHandler(ActionHandler):
    action_type = ActionType.CREATE_WALLET
    label = "wallet creation"
    start_phrase = "create a chipi wallet"
    confirm_phrase = "confirm chipi wallet creation"
    cancel_phrase = "cancel chipi wallet creation"
    success_fields = ("txHash", "publicKey")

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        wallet = get_wallet_for_agent(ctx.db, ctx.agent.id)
        if wallet is None:
            return None
        return composer.plain(
            f"You already have a Chipi wallet (public key: {wallet.public_key}). "
            "Say 'view wallet' to see its details.",
            source=self.action_type,
            state=ActionState.IDLE,
        )

    def confirmation_text(self, params: dict[str, Any]) -> str:
        return (
            "I'm about to create a new Chipi wallet for you. "
            f"Say '{self.confirm_phrase}' to continue or '{self.cancel_phrase}' to abort."
        )

    def secret_text(self, pending: PendingAction) -> str:
        return "Please enter a 4-digit PIN in the secure dialog. It will encrypt your new wallet's key."

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        wallet, created = create_wallet_if_not_exists(
            ctx.db,
            agent_id=ctx.agent.id,
            public_key=report["publicKey"],
            tx_hash=report["txHash"],
        )
        if not created:
            logger.warning("wallet already recorded for agent_id=%s, keeping existing row", ctx.agent.id)
        return composer.terminal(
            self.action_type,
            "Your Chipi wallet has been created! "
            f"Transaction hash: {report['txHash']}. Public key: {report['publicKey']}.",
            state=ActionState.COMPLETED,
            txHash=report["txHash"],
            publicKey=report["publicKey"],
        )
