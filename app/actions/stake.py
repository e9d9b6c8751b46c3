from __future__ import annotations

from typing import Any

from app.actions.approve_token import require_amount, require_wallet
from app.actions.base import ActionHandler, TurnContext
from app.actions.params import extract_address
from app.chat import composer
from app.chat.contracts import ComposedResponse
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.services.pending import PendingAction


class StakeUsdcHandler(ActionHandler):
    action_type = ActionType.STAKE_USDC
    label = "USDC stake"
    start_phrase = "stake usdc"
    confirm_phrase = "confirm usdc stake"
    cancel_phrase = "cancel usdc stake"
    success_fields = ("txHash", "amount")

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        return require_wallet(self, ctx)

    def extract_parameters(self, ctx: TurnContext) -> dict[str, Any]:
        params: dict[str, Any] = {"amount": require_amount(ctx, example="stake usdc amount: 100")}
        recipient = extract_address(ctx.text, label="recipient")
        if recipient:
            params["recipient"] = recipient
        return params

    def confirmation_text(self, params: dict[str, Any]) -> str:
        target = f" on behalf of {params['recipient']}" if params.get("recipient") else ""
        return (
            f"I'm about to stake {params['amount']} USDC in Vesu{target}. "
            f"Say '{self.confirm_phrase}' to continue or '{self.cancel_phrase}' to abort."
        )

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        return composer.terminal(
            self.action_type,
            f"Staked {report['amount']} USDC in Vesu. Transaction hash: {report['txHash']}.",
            state=ActionState.COMPLETED,
            txHash=report["txHash"],
            amount=str(report["amount"]),
        )
