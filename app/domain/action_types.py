from __future__ import annotations

from enum import Enum


class ActionType(str, Enum):
    CREATE_WALLET = "CREATE_WALLET"
    APPROVE_TOKEN = "APPROVE_TOKEN"
    STAKE_USDC = "STAKE_USDC"
    CONNECT_EXTERNAL_WALLET = "CONNECT_EXTERNAL_WALLET"
    REPLY_EMAIL = "REPLY_EMAIL"

    @classmethod
    def parse(cls, value: object) -> "ActionType | None":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class QueryAction(str, Enum):
    """Read-only replies; they never open a pending action."""

    VIEW_WALLET = "VIEW_WALLET"
    CHECK_EMAIL = "CHECK_EMAIL"
