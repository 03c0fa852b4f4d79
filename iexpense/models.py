"""Data models for the iExpense domain."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, Set, Union
from uuid import UUID, uuid4

from .exceptions import PersistenceError, ValidationError

__all__ = ["Category", "ExpenseRecord", "encode_records", "decode_records"]

logger = logging.getLogger(__name__)


class Category(str, Enum):
    BUSINESS = "business"
    PERSONAL = "personal"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        """Accept a member, a wire value or a display label in any case."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValidationError("type must be a string")
        canonical = value.strip().lower()
        for member in cls:
            if member.value == canonical:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise ValidationError(f"type must be one of: {allowed}")


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    name: str
    category: Category
    amount: Decimal

    @classmethod
    def create(
        cls, name: str, category: Union[Category, str], amount: Union[Decimal, float, int, str]
    ) -> "ExpenseRecord":
        """Build a new record with a freshly generated id."""
        return cls(
            id=str(uuid4()),
            name=name,
            category=Category.parse(category),
            amount=_to_decimal(amount),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.category.value,
            "amount": _to_number(self.amount),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate a record from its wire object."""
        if not isinstance(data, dict):
            raise ValidationError("record must be an object")
        try:
            record_id = data["id"]
            name = data["name"]
            category = data["type"]
            amount = data["amount"]
        except KeyError as exc:
            raise ValidationError(f"record is missing field {exc.args[0]!r}") from exc

        if not isinstance(record_id, str):
            raise ValidationError("id must be a UUID string")
        try:
            UUID(record_id)
        except ValueError as exc:
            raise ValidationError(f"id {record_id!r} is not a UUID") from exc
        if not isinstance(name, str):
            raise ValidationError("name must be a string")
        if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
            raise ValidationError("amount must be a number")

        return cls(
            id=record_id,
            name=name,
            category=Category.parse(category),
            amount=_to_decimal(amount),
        )


def encode_records(records: Iterable[ExpenseRecord]) -> bytes:
    """Encode the full record sequence as the persisted blob.

    Amounts are written as their exact decimal literal; json.dumps would
    route them through float and drop digits past double precision.
    """
    items = [
        "{%s, %s, %s, %s}"
        % (
            _member("id", record.id),
            _member("name", record.name),
            _member("type", Category.parse(record.category).value),
            f'"amount": {_decimal_literal(record.amount)}',
        )
        for record in records
    ]
    return ("[" + ", ".join(items) + "]").encode("utf-8")


def decode_records(raw: bytes) -> List[ExpenseRecord]:
    """Decode a persisted blob, raising PersistenceError when it is malformed."""
    try:
        # parse_float keeps amounts such as 4.1 exact instead of round-tripping through binary floats.
        payload = json.loads(raw.decode("utf-8"), parse_float=Decimal)
    except UnicodeDecodeError as exc:
        raise PersistenceError("Persisted data is not valid UTF-8") from exc
    except json.JSONDecodeError as exc:
        raise PersistenceError("Corrupted JSON data in persisted records") from exc

    if not isinstance(payload, list):
        raise PersistenceError("Expected list payload for persisted records")

    records: List[ExpenseRecord] = []
    seen: Set[str] = set()
    for position, item in enumerate(payload):
        try:
            record = ExpenseRecord.from_dict(item)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid record at position {position}: {exc}") from exc
        if record.id in seen:
            logger.warning("Skipping duplicate record id %s at position %d", record.id, position)
            continue
        seen.add(record.id)
        records.append(record)
    return records


def _to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() first so that 4.5 becomes Decimal("4.5") rather than its binary expansion.
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError) as exc:
            raise ValidationError("amount must be a numeric value") from exc
    if not amount.is_finite():
        raise ValidationError("amount must be a finite number")
    return amount


def _to_number(amount: Decimal) -> Union[int, float]:
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def _member(name: str, value: str) -> str:
    return f"{json.dumps(name)}: {json.dumps(value, ensure_ascii=False)}"


def _decimal_literal(amount: Decimal) -> str:
    if not isinstance(amount, Decimal) or not amount.is_finite():
        raise ValueError(f"amount {amount!r} cannot be written as a JSON number")
    return str(amount)
