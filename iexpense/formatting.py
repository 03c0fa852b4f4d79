"""Display helpers shared by the command line and desktop front ends."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Union

from .validators import sanitize_amount_input

LARGE_AMOUNT = Decimal("100")
MEDIUM_AMOUNT = Decimal("10")


class AmountTier(str, Enum):
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"


def amount_tier(amount: Union[Decimal, int, float]) -> AmountTier:
    """Bucket an amount for highlighting: 100 and up, above 10, everything else."""
    value = Decimal(str(amount))
    if value >= LARGE_AMOUNT:
        return AmountTier.LARGE
    if value > MEDIUM_AMOUNT:
        return AmountTier.MEDIUM
    return AmountTier.SMALL


def format_amount(value: Union[Decimal, str], currency: str = "USD") -> str:
    if isinstance(value, Decimal):
        return f"{currency} {value:,.2f}"
    sanitized = sanitize_amount_input(value)
    if not sanitized:
        return ""
    try:
        amount = Decimal(sanitized)
    except InvalidOperation:
        return value.strip()
    return f"{currency} {amount:,.2f}"
