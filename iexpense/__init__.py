"""Core record store for the iExpense tracker."""

from .models import Category, ExpenseRecord
from .services import ExpenseStore, SaveResult, StoreChange
from .storage import FileStorage, KeyValueStorage, MemoryStorage
from .exceptions import DuplicateRecordError, PersistenceError, ValidationError, RecordNotFoundError

__all__ = [
    "Category",
    "ExpenseRecord",
    "ExpenseStore",
    "SaveResult",
    "StoreChange",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "DuplicateRecordError",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
