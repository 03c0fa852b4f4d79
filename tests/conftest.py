"""Shared fixtures for the iExpense test-suite."""

import logging
from typing import Optional

import pytest

from iexpense.exceptions import PersistenceError
from iexpense.services import ExpenseStore
from iexpense.storage import MemoryStorage


class FlakyStorage(MemoryStorage):
    """Memory storage whose reads or writes can be made to fail."""

    def __init__(self, *, fail_reads: bool = False, fail_writes: bool = False) -> None:
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = 0

    def get(self, key: str) -> Optional[bytes]:
        if self.fail_reads:
            raise PersistenceError("disk unavailable")
        return super().get(key)

    def set(self, key: str, value: bytes) -> None:
        self.writes += 1
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().set(key, value)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "IEXPENSE_DATA_DIR",
        "IEXPENSE_STORAGE_KEY",
        "IEXPENSE_CURRENCY",
        "IEXPENSE_ENV",
        "IEXPENSE_ALLOWED_ORIGINS",
        "IEXPENSE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return ExpenseStore(storage, "Items")
