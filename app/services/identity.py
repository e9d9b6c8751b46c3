from __future__ import annotations

import logging
import re

from sqlalchemy.orm import Session

from app.domain.errors import IdentityResolutionError
from db.repos.users_repo import get_user_by_ref

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def resolve_user_id(db: Session, created_by_ref: str | None) -> str:
    """
    Stable user id behind an agent's created-by reference. Fails closed.
    """
    if not created_by_ref:
        raise IdentityResolutionError("agent has no created-by reference")

    user = get_user_by_ref(db, created_by_ref)
    if user is None:
        raise IdentityResolutionError(f"no user for created-by reference {created_by_ref}")

    if not _UUID_RE.match(user.user_id or ""):
        raise IdentityResolutionError(f"Invalid userId format: {user.user_id}")

    logger.debug("identity: resolved created_by_ref=%s", created_by_ref)
    return user.user_id
