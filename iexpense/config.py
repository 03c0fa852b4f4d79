"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .exceptions import ValidationError
from .services import DEFAULT_STORAGE_KEY
from .validators import validate_currency

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    storage_key: str = DEFAULT_STORAGE_KEY
    currency: str = "USD"
    env: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)
    log_level: str = "WARNING"

    @property
    def is_dev(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("IEXPENSE_ALLOWED_ORIGINS") or ""
        return cls(
            data_dir=Path(env.get("IEXPENSE_DATA_DIR") or "data"),
            storage_key=env.get("IEXPENSE_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
            currency=validate_currency((env.get("IEXPENSE_CURRENCY") or "USD").strip().upper()),
            env=(env.get("IEXPENSE_ENV") or "prod").strip().lower(),
            allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            log_level=validate_log_level(env.get("IEXPENSE_LOG_LEVEL") or "WARNING"),
        )


def validate_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValidationError(f"log level must be one of: {', '.join(sorted(LOG_LEVELS))}")
    return level


def configure_logging(level: str = "WARNING") -> None:
    """Route iexpense logging to stderr at ``level``."""
    root = logging.getLogger()
    if not any(getattr(handler, "_iexpense", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._iexpense = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(validate_log_level(level))
