from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ADAPTER_URL = "http://localhost:8080/"
DEFAULT_SUBSCRIPTION = "projects/local/subscriptions/climate-updates-push"
DEFAULT_TIMEOUT = 30.0

_PROJECT_ENV = "PROJECT"
_TOPIC_ENV = "TOPIC"
_ADAPTER_URL_ENV = "ADAPTER_URL"
_SUBSCRIPTION_ENV = "SUBSCRIPTION"
_TIMEOUT_ENV = "CLI_HTTP_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    project: Optional[str] = None
    topic: Optional[str] = None
    adapter_url: str = DEFAULT_ADAPTER_URL
    subscription: str = DEFAULT_SUBSCRIPTION
    timeout: float = DEFAULT_TIMEOUT


def _read_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(
    project: Optional[str] = None,
    topic: Optional[str] = None,
    adapter_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    if timeout is None:
        timeout = _read_float(_read_env(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    return CLIConfig(
        project=project or _read_env(_PROJECT_ENV),
        topic=topic or _read_env(_TOPIC_ENV),
        adapter_url=adapter_url or _read_env(_ADAPTER_URL_ENV) or DEFAULT_ADAPTER_URL,
        subscription=_read_env(_SUBSCRIPTION_ENV) or DEFAULT_SUBSCRIPTION,
        timeout=timeout,
    )
