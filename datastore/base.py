from __future__ import annotations

from typing import Protocol

from models.records import RowMutation


class StorageWriteError(RuntimeError):
    """The wide-column store rejected or failed to apply a mutation."""


class TableStore(Protocol):
    name: str

    def apply(self, mutation: RowMutation) -> None:
        ...
