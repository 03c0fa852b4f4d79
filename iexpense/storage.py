"""Key-value persistence backends for the expense record store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .exceptions import PersistenceError, ValidationError


class KeyValueStorage(ABC):
    """Byte values stored under string keys.

    Backends raise PersistenceError for read and write failures; deciding
    whether a failure is fatal is left to the caller.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under ``key`` or None when absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, overwriting any prior value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage, mostly useful for tests."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._values: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._values.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._values[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileStorage(KeyValueStorage):
    """Simple file-based storage with crash-safe writes, one file per key."""

    suffix = ".json"

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create storage directory {self._base_path}") from exc

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("wb") as handle:
                handle.write(value)
                handle.flush()
            # Use replace for atomic move on POSIX; readers never see a half-written file.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Unable to delete {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path

    def path_for(self, key: str) -> Path:
        if not isinstance(key, str) or not key.strip():
            raise ValidationError("storage key cannot be empty")
        if "/" in key or "\\" in key or key in {".", ".."}:
            raise ValidationError("storage key must not contain path separators")
        return self._base_path / f"{key}{self.suffix}"
