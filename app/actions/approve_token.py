from __future__ import annotations

from typing import Any

from app.actions.base import ActionHandler, TurnContext
from app.actions.params import extract_address, extract_amount
from app.chat import composer
from app.chat.contracts import ComposedResponse
from app.config import get_settings
from app.domain.action_state import ActionState
from app.domain.action_types import ActionType
from app.domain.errors import ValidationError
from app.services.pending import PendingAction
from db.repos.wallets_repo import get_wallet_for_agent


def require_wallet(handler: ActionHandler, ctx: TurnContext) -> ComposedResponse | None:
    if get_wallet_for_agent(ctx.db, ctx.agent.id) is not None:
        return None
    return composer.plain(
        f"You need a wallet before a {handler.label}. Say 'create a chipi wallet' to set one up first.",
        source=handler.action_type,
        state=ActionState.IDLE,
    )


def require_amount(ctx: TurnContext, *, example: str) -> str:
    amount = extract_amount(ctx.text)
    if amount is None:
        raise ValidationError(
            "amount missing",
            user_message=f"Please tell me how much, e.g. '{example}'.",
        )
    return amount


class ApproveTokenHandler(ActionHandler):
    action_type = ActionType.APPROVE_TOKEN
    label = "token approval"
    start_phrase = "approve usdc"
    confirm_phrase = "confirm token approval"
    cancel_phrase = "cancel token approval"
    success_fields = ("txHash",)

    def check_guard(self, ctx: TurnContext) -> ComposedResponse | None:
        return require_wallet(self, ctx)

    def extract_parameters(self, ctx: TurnContext) -> dict[str, Any]:
        default = get_settings().default_approval_contract
        return {
            "amount": require_amount(ctx, example="approve usdc amount: 100"),
            "contractAddress": extract_address(ctx.text, label="contractAddress") or default,
            "spender": extract_address(ctx.text, label="spender") or default,
        }

    def confirmation_text(self, params: dict[str, Any]) -> str:
        return (
            f"I'm about to approve {params['amount']} USDC for spender {params['spender']} "
            f"on contract {params['contractAddress']}. "
            f"Say '{self.confirm_phrase}' to continue or '{self.cancel_phrase}' to abort."
        )

    def complete(self, ctx: TurnContext, pending: PendingAction, report: dict[str, Any]) -> ComposedResponse:
        amount = pending.parameters.get("amount")
        return composer.terminal(
            self.action_type,
            f"Token approval submitted for {amount} USDC. Transaction hash: {report['txHash']}.",
            state=ActionState.COMPLETED,
            txHash=report["txHash"],
            amount=amount,
            spender=pending.parameters.get("spender"),
        )
