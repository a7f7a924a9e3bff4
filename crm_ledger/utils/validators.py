"""Deterministic validators and sanitizers shared by services and schemas."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from crm_ledger.core.exceptions import ValidationError

CENT = Decimal("0.01")
_NON_ALPHA = re.compile(r"[^A-Za-z]")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    cleaned = cleaned[:max_len]
    return cleaned


def letters_only(value: str | None) -> str:
    """Drop every character that is not an ASCII letter."""
    return _NON_ALPHA.sub("", value or "")


def to_money(value: Decimal | int | float | str | None, field: str = "amount") -> Decimal:
    """Coerce a numeric input into a two-decimal currency value."""
    if value is None:
        return Decimal("0.00")
    try:
        # str() first so that floats such as 0.1 keep their printed value.
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number.") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number.")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_company_id(raw: str | int | None) -> int:
    """Validate the tenant path segment."""
    try:
        company_id = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid companyId") from exc
    if company_id < 1:
        raise ValidationError("Invalid companyId")
    return company_id
