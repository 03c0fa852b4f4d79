"""The expense record store: single owner of the record sequence."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from .exceptions import DuplicateRecordError, PersistenceError, RecordNotFoundError
from .models import Category, ExpenseRecord, decode_records, encode_records
from .storage import KeyValueStorage

__all__ = ["DEFAULT_STORAGE_KEY", "ExpenseStore", "SaveResult", "StoreChange"]

DEFAULT_STORAGE_KEY = "Items"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of writing the record sequence back to storage."""

    saved: bool
    error: Optional[PersistenceError] = None

    def __bool__(self) -> bool:
        return self.saved


@dataclass(frozen=True)
class StoreChange:
    """Delivered to observers after every mutation of the store."""

    action: str
    records: Tuple[ExpenseRecord, ...]
    result: SaveResult


Observer = Callable[[StoreChange], None]


class ExpenseStore:
    """Owns expense records and mediates persistence."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lock = threading.RLock()
        self._observers: List[Observer] = []
        self._records: List[ExpenseRecord] = self.load()  # Hydrate from persistence on construction.

    # Public API -----------------------------------------------------------
    def load(self) -> List[ExpenseRecord]:
        """Read the persisted sequence; missing or unreadable data means no history."""
        try:
            raw = self._storage.get(self._key)
        except PersistenceError as exc:
            logger.warning("Unable to read records under %r, starting empty: %s", self._key, exc)
            return []
        if raw is None:
            return []
        try:
            return decode_records(raw)
        except PersistenceError as exc:
            logger.warning("Discarding malformed records under %r: %s", self._key, exc)
            return []

    def add(self, record: ExpenseRecord) -> SaveResult:
        with self._lock:
            if any(existing.id == record.id for existing in self._records):
                raise DuplicateRecordError(f"Expense {record.id} is already stored")
            self._records.append(record)
            logger.debug("Added expense %s", record.id)
            result = self.persist()
            self._notify(StoreChange("add", (record,), result))
            return result

    def remove(self, indices: Iterable[int]) -> SaveResult:
        """Remove records at the given positions; positions out of range are ignored."""
        with self._lock:
            size = len(self._records)
            doomed = {index for index in indices if 0 <= index < size}
            removed = tuple(self._records[index] for index in sorted(doomed))
            self._records = [
                record for position, record in enumerate(self._records) if position not in doomed
            ]
            logger.debug("Removed %d expense(s)", len(removed))
            result = self.persist()
            self._notify(StoreChange("remove", removed, result))
            return result

    def delete(self, record_id: str) -> SaveResult:
        with self._lock:
            return self.remove({self.index_of(record_id)})

    def persist(self) -> SaveResult:
        """Write the full sequence under the store key, overwriting prior data."""
        with self._lock:
            try:
                self._storage.set(self._key, encode_records(self._records))
            except PersistenceError as exc:
                logger.warning("Failed to save %d expense(s): %s", len(self._records), exc)
                return SaveResult(False, exc)
            except (TypeError, ValueError, ArithmeticError) as exc:
                error = PersistenceError(f"Unable to encode expenses: {exc}")
                logger.warning("Failed to save %d expense(s): %s", len(self._records), error)
                return SaveResult(False, error)
            return SaveResult(True)

    def refresh(self) -> List[ExpenseRecord]:
        """Replace the in-memory sequence with whatever storage currently holds."""
        with self._lock:
            self._records = self.load()
            snapshot = tuple(self._records)
            self._notify(StoreChange("refresh", snapshot, SaveResult(True)))
            return list(snapshot)

    def category_view(self, category: Union[Category, str]) -> List[ExpenseRecord]:
        wanted = Category.parse(category)
        with self._lock:
            return [record for record in self._records if record.category == wanted]

    def get(self, record_id: str) -> ExpenseRecord:
        """Return a record or raise if it does not exist."""
        with self._lock:
            return self._records[self.index_of(record_id)]

    def index_of(self, record_id: str) -> int:
        with self._lock:
            for position, record in enumerate(self._records):
                if record.id == record_id:
                    return position
        raise RecordNotFoundError(f"Expense {record_id} not found")

    def total(self, category: Optional[Union[Category, str]] = None) -> Decimal:
        records = self.records if category is None else self.category_view(category)
        return sum((record.amount for record in records), start=Decimal("0.00"))

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer``; the returned callable unsubscribes it."""
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    @property
    def records(self) -> Tuple[ExpenseRecord, ...]:
        with self._lock:
            return tuple(self._records)

    @property
    def key(self) -> str:
        return self._key

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[ExpenseRecord]:
        return iter(self.records)

    # Internal helpers -----------------------------------------------------
    def _notify(self, change: StoreChange) -> None:
        for observer in list(self._observers):
            observer(change)
