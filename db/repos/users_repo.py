from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.user import User


def create_user(db: Session, *, ref: str, user_id: str, email: str | None = None) -> User:
    user = User(ref=ref, user_id=user_id, email=email)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_ref(db: Session, ref: str) -> User | None:
    return db.execute(select(User).where(User.ref == ref)).scalar_one_or_none()
