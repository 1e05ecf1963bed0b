from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_PROJECT_ENV = "PROJECT"
_INSTANCE_ENV = "INSTANCE"
_TABLE_ENV = "TABLE"
_PORT_ENV = "PORT"
_STORE_BACKEND_ENV = "STORE_BACKEND"
_STORE_PATH_ENV = "STORE_PERSISTENCE_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_PORT = 8080
STORE_BACKENDS = ("bigtable", "memory")


class ConfigurationError(RuntimeError):
    """Raised when the service cannot start with the supplied environment."""


@dataclass(frozen=True)
class Settings:
    project: Optional[str]
    instance: Optional[str]
    table: Optional[str]
    port: int
    store_backend: str
    store_persistence_path: Optional[str]
    log_level: str

    def missing_required(self) -> list[str]:
        required = {
            _PROJECT_ENV: self.project,
            _INSTANCE_ENV: self.instance,
            _TABLE_ENV: self.table,
        }
        return [name for name, value in required.items() if not value]


def _read_optional_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_port(default: int) -> int:
    value = _read_optional_env(_PORT_ENV)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{_PORT_ENV} must be an integer, got {value!r}.") from exc
    if not 0 < parsed < 65536:
        raise ConfigurationError(f"{_PORT_ENV} must be between 1 and 65535, got {parsed}.")
    return parsed


def _read_store_backend(default: str) -> str:
    value = _read_optional_env(_STORE_BACKEND_ENV)
    if value is None:
        return default
    candidate = value.lower()
    if candidate not in STORE_BACKENDS:
        raise ConfigurationError(
            f"{_STORE_BACKEND_ENV} must be one of {', '.join(STORE_BACKENDS)}, got {value!r}."
        )
    return candidate


def read_log_level(default: str = "INFO") -> str:
    value = _read_optional_env(_LOG_LEVEL_ENV)
    if value is None:
        return default
    return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        project=_read_optional_env(_PROJECT_ENV),
        instance=_read_optional_env(_INSTANCE_ENV),
        table=_read_optional_env(_TABLE_ENV),
        port=_read_port(DEFAULT_PORT),
        store_backend=_read_store_backend("bigtable"),
        store_persistence_path=_read_optional_env(_STORE_PATH_ENV),
        log_level=read_log_level(),
    )


def require_service_settings() -> Settings:
    """Return the settings, refusing to continue when mandatory values are absent."""
    settings = get_settings()
    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(
            "Unable to start the service as one or more required fields is not supplied "
            f"(missing: {', '.join(missing)}; project={settings.project}, "
            f"instance={settings.instance}, table={settings.table})"
        )
    return settings
