from __future__ import annotations

from typing import Any, List, Optional

import pytest
from google.api_core import exceptions as core_exceptions

from datastore.base import StorageWriteError
from datastore.bigtable import BigtableTable
from models.records import Cell, RowMutation

TIMESTAMP = 1_700_000_000_000_000


class StubDataTable:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[tuple[str, list]] = []

    def mutate_row(self, row_key: str, mutations: list) -> None:
        self.calls.append((row_key, mutations))
        if self.error is not None:
            raise self.error


class StubDataClient:
    def __init__(self, table: StubDataTable) -> None:
        self.table = table
        self.project: Optional[str] = None
        self.opened: List[tuple[str, str]] = []
        self.closed = False

    def get_table(self, instance_id: str, table_id: str) -> StubDataTable:
        self.opened.append((instance_id, table_id))
        return self.table

    def close(self) -> None:
        self.closed = True


def _factory(clients: List[StubDataClient], error: Optional[Exception] = None):
    def build(project: str) -> Any:
        client = StubDataClient(StubDataTable(error))
        client.project = project
        clients.append(client)
        return client

    return build


def _mutation() -> RowMutation:
    return RowMutation(
        row_key="IL#Will#Joliet#2023#2",
        cells=(
            Cell("climate_summary", "pollution", b"LOW", TIMESTAMP),
            Cell("climate_summary", "temperature", b"21.600000", TIMESTAMP),
            Cell("climate_summary", "pressure", b"30.000000", TIMESTAMP),
        ),
    )


def test_apply_issues_one_mutate_row_with_three_cells() -> None:
    clients: List[StubDataClient] = []
    table = BigtableTable("proj", "inst", "climate", client_factory=_factory(clients))

    table.apply(_mutation())

    assert len(clients) == 1
    client = clients[0]
    assert client.project == "proj"
    assert client.opened == [("inst", "climate")]
    assert client.closed is True
    [(row_key, mutations)] = client.table.calls
    assert row_key == "IL#Will#Joliet#2023#2"
    assert [m.family for m in mutations] == ["climate_summary"] * 3
    assert [m.qualifier for m in mutations] == [b"pollution", b"temperature", b"pressure"]
    assert [m.new_value for m in mutations] == [b"LOW", b"21.600000", b"30.000000"]
    assert {m.timestamp_micros for m in mutations} == {TIMESTAMP}


def test_each_apply_opens_a_fresh_client() -> None:
    clients: List[StubDataClient] = []
    table = BigtableTable("proj", "inst", "climate", client_factory=_factory(clients))

    table.apply(_mutation())
    table.apply(_mutation())

    assert len(clients) == 2
    assert clients[0] is not clients[1]
    assert all(client.closed for client in clients)


def test_backend_error_is_wrapped_and_client_closed() -> None:
    clients: List[StubDataClient] = []
    table = BigtableTable(
        "proj",
        "inst",
        "climate",
        client_factory=_factory(clients, core_exceptions.ServiceUnavailable("backend down")),
    )

    with pytest.raises(StorageWriteError, match="backend down"):
        table.apply(_mutation())

    assert clients[0].closed is True


def test_client_creation_failure_is_wrapped() -> None:
    def broken_factory(project: str) -> Any:
        raise core_exceptions.PermissionDenied("no access")

    table = BigtableTable("proj", "inst", "climate", client_factory=broken_factory)

    with pytest.raises(StorageWriteError, match="client creation failed"):
        table.apply(_mutation())
