from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.email import Email


def add_email(
    db: Session,
    *,
    email_id: str,
    agent_id: str,
    from_address: str,
    body: str,
    subject: str | None = None,
    from_name: str | None = None,
    received_at: datetime | None = None,
) -> Email:
    email = Email(
        id=email_id,
        agent_id=agent_id,
        from_address=from_address,
        from_name=from_name,
        subject=subject,
        body=body,
    )
    if received_at is not None:
        email.received_at = received_at
    db.add(email)
    db.commit()
    db.refresh(email)
    return email


def get_email(db: Session, *, agent_id: str, email_id: str) -> Email | None:
    stmt = select(Email).where(Email.id == email_id).where(Email.agent_id == agent_id)
    return db.execute(stmt).scalar_one_or_none()


def list_recent_emails(
    db: Session,
    *,
    agent_id: str,
    now: datetime,
    lookback: timedelta = timedelta(hours=24),
    limit: int = 20,
) -> list[Email]:
    stmt = (
        select(Email)
        .where(Email.agent_id == agent_id)
        .where(Email.received_at >= now - lookback)
        .order_by(Email.received_at.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())
