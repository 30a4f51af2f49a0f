"""Utilities for converting token amounts between human and base units."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Any, Optional


def to_decimal(raw: Any) -> Optional[Decimal]:
    """Parse ``raw`` into a finite ``Decimal``; ``None`` when unparsable."""

    if raw is None:
        return None
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def _precision_for(value: Decimal, decimals: int) -> int:
    # enough digits to hold the value exactly at either scale
    _, digits, exponent = value.as_tuple()
    return len(digits) + abs(exponent) + abs(decimals) + 1


def is_empty_amount(amount: Optional[str]) -> bool:
    """Return ``True`` for amounts that must short-circuit a quote fetch.

    Empty strings, a lone decimal point, unparsable input and numeric zero all
    count as empty.
    """

    if amount is None:
        return True
    text = amount.strip()
    if text in ("", "."):
        return True
    value = to_decimal(text)
    return value is None or value == 0


def to_base_units(amount: str, decimals: int) -> str:
    """Convert a human amount (``"1.5"``) to integer base units (``"1500000"``)."""

    value = to_decimal(amount)
    if value is None:
        raise ValueError(f"Invalid token amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = _precision_for(value, decimals)
        scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_DOWN)
    return str(int(scaled))


def format_token_amount(amount: str, decimals: int) -> str:
    """Convert integer base units into a human amount without trailing zeros."""

    value = to_decimal(amount)
    if value is None:
        return ""
    with localcontext() as ctx:
        ctx.prec = _precision_for(value, decimals)
        human = value.scaleb(-decimals)
        if human == 0:
            return "0"
        return format(human.normalize(), "f")


__all__ = [
    'to_decimal',
    'is_empty_amount',
    'to_base_units',
    'format_token_amount',
]
