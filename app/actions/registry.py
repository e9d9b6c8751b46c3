from __future__ import annotations

from app.actions.approve_token import ApproveTokenHandler
from app.actions.base import ActionHandler
from app.actions.connect_wallet import ConnectExternalWalletHandler
from app.actions.create_wallet import CreateWalletHandler
from app.actions.reply_email import ReplyEmailHandler
from app.actions.stake import StakeUsdcHandler
from app.domain.action_types import ActionType

HANDLERS: dict[ActionType, ActionHandler] = {
    handler.action_type: handler
    for handler in (
        CreateWalletHandler(),
        ApproveTokenHandler(),
        StakeUsdcHandler(),
        ConnectExternalWalletHandler(),
        ReplyEmailHandler(),
    )
}


def get_handler(action_type: ActionType) -> ActionHandler:
    return HANDLERS[action_type]
