"""Validation helpers used where user input enters the application."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from .exceptions import ValidationError
from .models import Category, ExpenseRecord

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
CURRENCY_SYMBOLS = "$€£¥"

NAME_MAX_LENGTH = 100
DEFAULT_CATEGORY = Category.BUSINESS


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def sanitize_amount_input(raw: str) -> str:
    cleaned = raw.replace(",", "").strip()
    return cleaned.lstrip(CURRENCY_SYMBOLS).strip()


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a non-negative Decimal with exactly two fraction digits.

    Blank input falls back to zero, matching the add form's numeric default.
    """
    if raw is None:
        return Decimal("0.00")
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    text = sanitize_amount_input(raw) if isinstance(raw, str) else str(raw)
    if not text:
        return Decimal("0.00")
    try:
        amount = Decimal(text)
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")

    try:
        return _quantize_two_decimals(amount)
    except InvalidOperation as exc:
        # More digits than the decimal context can hold once two fraction places are added.
        raise ValidationError(f"{field} is too large") from exc


def validate_currency(code: object) -> str:
    if not isinstance(code, str) or not CURRENCY_PATTERN.fullmatch(code):
        raise ValidationError("currency must be a 3-letter ISO 4217 code (uppercase)")
    return code


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_category(value: Optional[object]) -> Category:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_CATEGORY
    if not isinstance(value, (Category, str)):
        raise ValidationError("type must be a string")
    return Category.parse(value)


def record_from_payload(payload: Dict[str, object]) -> ExpenseRecord:
    """Build a new record from user-supplied fields.

    ``type`` is the wire name of the category; ``category`` is accepted as an
    alias since that is what the command line and the desktop form call it.
    """
    raw_category = payload.get("type", payload.get("category"))
    return ExpenseRecord.create(
        name=validate_required_str(payload.get("name"), "name", NAME_MAX_LENGTH),
        category=validate_category(raw_category),
        amount=parse_amount(payload.get("amount"), "amount"),
    )
