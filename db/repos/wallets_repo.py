from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.models.wallet import ExternalWallet, Wallet


def get_wallet_for_agent(db: Session, agent_id: str) -> Wallet | None:
    return db.execute(select(Wallet).where(Wallet.agent_id == agent_id)).scalar_one_or_none()


def create_wallet_if_not_exists(
    db: Session,
    *,
    agent_id: str,
    public_key: str,
    tx_hash: str,
) -> tuple[Wallet, bool]:
    """
    Returns ``(wallet, created)``. Existence is re-checked right before the
    insert; a concurrent insert that wins the race surfaces as an
    IntegrityError on the unique agent_id and the existing row is returned.
    """
    existing = get_wallet_for_agent(db, agent_id)
    if existing:
        return existing, False

    wallet = Wallet(agent_id=agent_id, public_key=public_key, tx_hash=tx_hash)
    db.add(wallet)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_wallet_for_agent(db, agent_id)
        if existing is None:
            raise
        return existing, False
    db.refresh(wallet)
    return wallet, True


def get_external_wallet_for_agent(db: Session, agent_id: str) -> ExternalWallet | None:
    stmt = select(ExternalWallet).where(ExternalWallet.agent_id == agent_id)
    return db.execute(stmt).scalar_one_or_none()


def create_external_wallet_if_not_exists(
    db: Session,
    *,
    agent_id: str,
    public_key: str,
    zk_proof_hash: str,
    runes_verified: bool = False,
) -> tuple[ExternalWallet, bool]:
    existing = get_external_wallet_for_agent(db, agent_id)
    if existing:
        return existing, False

    record = ExternalWallet(
        agent_id=agent_id,
        public_key=public_key,
        zk_proof_hash=zk_proof_hash,
        runes_verified=runes_verified,
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_external_wallet_for_agent(db, agent_id)
        if existing is None:
            raise
        return existing, False
    db.refresh(record)
    return record, True
