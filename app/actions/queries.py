"""Read-only query turns. They carry an ``action`` but never a prompt marker."""
from __future__ import annotations

from datetime import timedelta

from app.actions.base import TurnContext
from app.chat import composer
from app.chat.contracts import ComposedResponse, EmailEntry, WalletEntry
from app.domain.action_types import QueryAction
from db.repos.emails_repo import list_recent_emails
from db.repos.wallets_repo import get_external_wallet_for_agent, get_wallet_for_agent
from db.utils.time import as_utc


def view_wallet(ctx: TurnContext) -> ComposedResponse:
    entries: list[WalletEntry] = []

    wallet = get_wallet_for_agent(ctx.db, ctx.agent.id)
    if wallet is not None:
        entries.append(
            WalletEntry(
                walletId=str(wallet.id),
                address=wallet.public_key,
                status="active",
                details=f"Chipi wallet, created in tx {wallet.tx_hash}",
            )
        )

    external = get_external_wallet_for_agent(ctx.db, ctx.agent.id)
    if external is not None:
        entries.append(
            WalletEntry(
                walletId=str(external.id),
                address=external.public_key,
                status="connected",
                details="Starknet wallet" + (", Runes verified" if external.runes_verified else ""),
            )
        )

    if not entries:
        return composer.plain(
            "You don't have a wallet yet. Say 'create a chipi wallet' to set one up.",
            source=QueryAction.VIEW_WALLET,
        )

    return composer.compose(
        f"You have {len(entries)} wallet(s).",
        action=QueryAction.VIEW_WALLET,
        wallets=entries,
    )


def check_email(ctx: TurnContext) -> ComposedResponse:
    emails = list_recent_emails(ctx.db, agent_id=ctx.agent.id, now=ctx.now, lookback=timedelta(hours=24))
    if not emails:
        return composer.plain("No new emails in the last 24 hours.", source=QueryAction.CHECK_EMAIL)

    entries = [
        EmailEntry(
            emailId=email.id,
            fromAddress=email.from_address,
            fromName=email.from_name,
            subject=email.subject,
            date=as_utc(email.received_at).isoformat(),
            body=email.body,
        )
        for email in emails
    ]
    return composer.compose(
        f"You have {len(entries)} email(s) from the last 24 hours. "
        "To answer one, say 'reply to emailId: <id>'.",
        action=QueryAction.CHECK_EMAIL,
        emails=entries,
    )
