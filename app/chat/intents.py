from __future__ import annotations

from typing import Any

from app.chat.contracts import Domain, Intent, SubIntent
from app.domain.action_types import ActionType

A = ActionType

# Ordered: confirm/cancel phrases contain start phrases ("confirm chipi wallet
# creation" contains "chipi wallet"), so they are matched first.
_PHRASES: list[tuple[tuple[str, ...], Intent]] = [
    (("confirm chipi wallet creation", "confirm wallet creation"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CONFIRM, action_type=A.CREATE_WALLET)),
    (("cancel chipi wallet creation", "cancel wallet creation"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CANCEL, action_type=A.CREATE_WALLET)),
    (("confirm token approval",),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CONFIRM, action_type=A.APPROVE_TOKEN)),
    (("cancel token approval",),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CANCEL, action_type=A.APPROVE_TOKEN)),
    (("confirm usdc stake", "confirm stake"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CONFIRM, action_type=A.STAKE_USDC)),
    (("cancel usdc stake", "cancel stake"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CANCEL, action_type=A.STAKE_USDC)),
    (("confirm starknet connection", "confirm wallet connection"),
     Intent(domain=Domain.EXTERNAL_WALLET, sub_intent=SubIntent.CONFIRM, action_type=A.CONNECT_EXTERNAL_WALLET)),
    (("cancel starknet connection", "cancel wallet connection"),
     Intent(domain=Domain.EXTERNAL_WALLET, sub_intent=SubIntent.CANCEL, action_type=A.CONNECT_EXTERNAL_WALLET)),
    (("confirm reply",),
     Intent(domain=Domain.EMAIL, sub_intent=SubIntent.CONFIRM, action_type=A.REPLY_EMAIL)),
    (("cancel reply",),
     Intent(domain=Domain.EMAIL, sub_intent=SubIntent.CANCEL, action_type=A.REPLY_EMAIL)),
    (("create a chipi wallet", "create chipi wallet", "new chipi wallet", "create a wallet", "create wallet"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.CREATE, action_type=A.CREATE_WALLET)),
    (("view wallet", "show wallet", "wallet details", "check wallet"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.VIEW)),
    (("approve usdc", "approve token", "authorize contract"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.APPROVE, action_type=A.APPROVE_TOKEN)),
    (("stake vesu usdc", "stake usdc", "stake wallet"),
     Intent(domain=Domain.WALLET, sub_intent=SubIntent.STAKE, action_type=A.STAKE_USDC)),
    (("reply to emailid", "reply to this emailid", "respond to emailid", "generate a reply", "send reply", "reply to email"),
     Intent(domain=Domain.EMAIL, sub_intent=SubIntent.REPLY, action_type=A.REPLY_EMAIL)),
    (("check email", "check mail", "new email", "receive email", "have i received", "any email",
      "inbox", "mailbox", "show email", "read email"),
     Intent(domain=Domain.EMAIL, sub_intent=SubIntent.CHECK)),
    (("connect starknet", "link starknet wallet", "verify runes", "connect external wallet", "connect wallet"),
     Intent(domain=Domain.EXTERNAL_WALLET, sub_intent=SubIntent.CONNECT, action_type=A.CONNECT_EXTERNAL_WALLET)),
]

_ACTION_DOMAINS = {
    A.CREATE_WALLET: Domain.WALLET,
    A.APPROVE_TOKEN: Domain.WALLET,
    A.STAKE_USDC: Domain.WALLET,
    A.CONNECT_EXTERNAL_WALLET: Domain.EXTERNAL_WALLET,
    A.REPLY_EMAIL: Domain.EMAIL,
}


def domain_for(action_type: ActionType) -> Domain:
    return _ACTION_DOMAINS[action_type]


def _metadata_domain(metadata: dict[str, Any]) -> Domain | None:
    if isinstance(metadata.get("wallets"), list):
        return Domain.WALLET
    if metadata.get("pendingReply"):
        return Domain.EMAIL
    action = ActionType.parse(metadata.get("action"))
    if action is not None:
        return domain_for(action)
    return None


def _match_text(text: str, *, domain: Domain | None) -> Intent | None:
    lowered = text.lower()
    for phrases, intent in _PHRASES:
        if domain is not None and intent.domain != domain:
            continue
        if any(phrase in lowered for phrase in phrases):
            return intent
    return None


def classify(text: Any, metadata: Any = None, source: Any = None) -> Intent | None:
    """
    Map one chat turn to a (domain, sub-intent) pair.

    Metadata decides the domain when present; text then picks the sub-intent
    inside it. Never raises: anything unrecognised returns None.
    """
    text = text if isinstance(text, str) else ""
    metadata = metadata if isinstance(metadata, dict) else {}

    reported = ActionType.parse(source)
    if reported is not None:
        return Intent(domain=domain_for(reported), sub_intent=SubIntent.REPORT, action_type=reported)

    domain = _metadata_domain(metadata)
    if domain is not None:
        matched = _match_text(text, domain=domain)
        if matched is not None:
            return matched
        if domain == Domain.WALLET and isinstance(metadata.get("wallets"), list):
            return Intent(domain=Domain.WALLET, sub_intent=SubIntent.VIEW)
        if domain == Domain.EMAIL and metadata.get("pendingReply"):
            return Intent(domain=Domain.EMAIL, sub_intent=SubIntent.REPLY, action_type=A.REPLY_EMAIL)
        return None

    return _match_text(text, domain=None)
