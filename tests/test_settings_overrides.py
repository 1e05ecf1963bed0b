from __future__ import annotations

from typing import Iterator

import pytest

from datastore.bigtable import BigtableTable
from datastore.factory import build_default_table
from datastore.mock_bigtable import MockBigtableTable
from services.ingestion import build_default_ingestion_service
from settings import ConfigurationError, get_settings, require_service_settings

_ENV_NAMES = ("PROJECT", "INSTANCE", "TABLE", "PORT", "STORE_BACKEND", "STORE_PERSISTENCE_PATH", "LOG_LEVEL")


def _clear_caches() -> None:
    for cache in (get_settings, build_default_table, build_default_ingestion_service):
        cache.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> Iterator[None]:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    _clear_caches()
    yield
    _clear_caches()


def _set_required(monkeypatch) -> None:
    monkeypatch.setenv("PROJECT", "proj")
    monkeypatch.setenv("INSTANCE", "inst")
    monkeypatch.setenv("TABLE", "climate")


def test_defaults_apply_when_env_is_empty() -> None:
    settings = get_settings()

    assert settings.port == 8080
    assert settings.store_backend == "bigtable"
    assert settings.log_level == "INFO"
    assert settings.missing_required() == ["PROJECT", "INSTANCE", "TABLE"]


def test_environment_overrides_apply(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("PORT", " 9090 ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = require_service_settings()

    assert (settings.project, settings.instance, settings.table) == ("proj", "inst", "climate")
    assert settings.port == 9090
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("missing", ["PROJECT", "INSTANCE", "TABLE"])
def test_gate_rejects_each_missing_variable(monkeypatch, missing: str) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv(missing, "  ")

    with pytest.raises(ConfigurationError, match=missing):
        require_service_settings()


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port_is_rejected(monkeypatch, port: str) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("PORT", port)

    with pytest.raises(ConfigurationError, match="PORT"):
        get_settings()


def test_unknown_store_backend_is_rejected(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("STORE_BACKEND", "dynamodb")

    with pytest.raises(ConfigurationError, match="STORE_BACKEND"):
        get_settings()


def test_memory_backend_builds_mock_table(monkeypatch, tmp_path) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("STORE_PERSISTENCE_PATH", str(tmp_path / "rows.json"))

    table = build_default_table()

    assert isinstance(table, MockBigtableTable)
    assert table.name == "climate"
    assert table.persistence_path == tmp_path / "rows.json"
    assert build_default_ingestion_service().table is table


def test_backend_argument_overrides_environment(monkeypatch) -> None:
    _set_required(monkeypatch)

    table = build_default_table(backend="memory")

    assert get_settings().store_backend == "bigtable"
    assert isinstance(table, MockBigtableTable)
    assert table.persistence_path is None
    assert isinstance(build_default_table(), BigtableTable)


def test_default_backend_builds_bigtable_table(monkeypatch) -> None:
    _set_required(monkeypatch)

    table = build_default_table()

    assert isinstance(table, BigtableTable)
    assert (table.project, table.instance, table.name) == ("proj", "inst", "climate")
