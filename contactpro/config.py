"""Configuration helpers for ContactPro."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional


STORAGE_BACKENDS = ("file", "firestore", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(RuntimeError):
    """Raised when configuration values are invalid."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration shared by the CLI, shell and API."""

    storage_backend: str = "file"
    data_dir: Path = Path("contactpro_data")
    firestore_collection: str = "contactpro"
    history_limit: Optional[int] = None
    environment: str = "local"
    log_level: str = "WARNING"
    allowed_frontend: str = ""


def load_settings(*, prefix: str = "CPX_") -> Settings:
    """Load settings from environment variables.

    Args:
        prefix: Prefix shared by every ContactPro environment variable.

    Returns:
        Settings with defaults filled in for anything unset.

    Raises:
        ConfigError: if a variable holds an unsupported value.
    """

    def env(name: str, default: str = "") -> str:
        return os.getenv(f"{prefix}{name}", default).strip()

    backend = env("STORAGE_BACKEND", "file").lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Unsupported storage backend {backend!r}. "
            f"Use one of: {', '.join(STORAGE_BACKENDS)}."
        )

    raw_limit = env("HISTORY_LIMIT", "0")
    try:
        limit = int(raw_limit)
    except ValueError as exc:
        raise ConfigError(f"{prefix}HISTORY_LIMIT must be an integer, got {raw_limit!r}.") from exc
    if limit < 0 or limit == 1:
        raise ConfigError(f"{prefix}HISTORY_LIMIT must be 0 (unbounded) or at least 2.")

    log_level = env("LOG_LEVEL", "WARNING").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level {log_level!r}.")

    return Settings(
        storage_backend=backend,
        data_dir=Path(env("DATA_DIR") or "contactpro_data"),
        firestore_collection=env("FIRESTORE_COLLECTION") or "contactpro",
        history_limit=limit or None,
        environment=env("ENV") or "local",
        log_level=log_level,
        allowed_frontend=env("ALLOWED_FRONTEND"),
    )
