from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from app.domain.errors import ValidationError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")
_PIN_RE = re.compile(r"^\d{4}$")
_AMOUNT_RE = re.compile(r"amount:\s*(\S+)", re.IGNORECASE)
_PIN_IN_TEXT_RE = re.compile(r"\b(pin|encryptkey)\s*[:=]\s*\S+", re.IGNORECASE)
_EMAIL_ID_RE = re.compile(r"emailId:\s*([^\s]+)", re.IGNORECASE)
_EMAIL_NUMBER_RE = re.compile(r"reply to email (\d+)", re.IGNORECASE)
_REPLY_BODY_RE = re.compile(r"message:\s*(.+)$", re.IGNORECASE | re.DOTALL)


def _labelled(label: str) -> re.Pattern[str]:
    return re.compile(rf"{label}:\s*(\S+)", re.IGNORECASE)


def extract_amount(text: str) -> str | None:
    """
    Positive decimal amount from ``amount: <n>``. Missing returns None;
    present-but-malformed raises ValidationError.
    """
    match = _AMOUNT_RE.search(text or "")
    if not match:
        return None
    raw = match.group(1).rstrip(".,;")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(
            f"invalid amount: {raw!r}",
            user_message=f"'{raw}' is not a valid amount. Please use a positive number, e.g. 'amount: 100'.",
        )
    if not value.is_finite() or value <= 0:
        raise ValidationError(
            f"non-positive amount: {raw!r}",
            user_message="The amount must be greater than zero.",
        )
    return raw


def validate_address(value: str, *, field: str) -> str:
    if not _ADDRESS_RE.fullmatch(value or ""):
        raise ValidationError(
            f"invalid {field}: {value!r}",
            user_message=f"The {field} '{value}' doesn't look like a valid address (expected 0x followed by hex digits).",
        )
    return value


def extract_address(text: str, *, label: str) -> str | None:
    match = _labelled(label).search(text or "")
    if not match:
        return None
    return validate_address(match.group(1).rstrip(".,;"), field=label)


def validate_pin(pin: str) -> str:
    if not _PIN_RE.fullmatch(pin or ""):
        raise ValidationError("PIN must be 4 digits", user_message="PIN must be exactly 4 digits.")
    return pin


def contains_secret(text: str) -> bool:
    return bool(_PIN_IN_TEXT_RE.search(text or ""))


def redact_secrets(text: str) -> str:
    return _PIN_IN_TEXT_RE.sub(lambda m: f"{m.group(1)}: ****", text or "")


def extract_email_id(text: str) -> str | None:
    match = _EMAIL_ID_RE.search(text or "")
    if match:
        return match.group(1).strip("<>").rstrip(".,;").strip()
    match = _EMAIL_NUMBER_RE.search(text or "")
    if match:
        return match.group(1)
    return None


def extract_reply_body(text: str) -> str | None:
    match = _REPLY_BODY_RE.search(text or "")
    if not match:
        return None
    body = match.group(1).strip()
    return body or None


_SECRET_KEYS = {"pin", "encryptkey", "privatekey"}


def redact_metadata(metadata: dict | None) -> dict:
    """Drop secret-bearing keys before a payload is persisted."""
    return {k: v for k, v in (metadata or {}).items() if k.lower() not in _SECRET_KEYS}
