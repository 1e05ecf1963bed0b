from __future__ import annotations

import base64
import json
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from models.records import Cell, RowMutation

# row key -> "family:column" -> versions, newest first
_Rows = Dict[str, Dict[str, List[Cell]]]


class MockBigtableTable:
    """In-memory stand-in for a Bigtable table that keeps every cell version."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._rows: _Rows = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def apply(self, mutation: RowMutation) -> None:
        with self._lock:
            row = self._rows.setdefault(mutation.row_key, {})
            for cell in mutation.cells:
                versions = row.setdefault(f"{cell.family}:{cell.column}", [])
                # Same timestamp replaces the existing version, as in Bigtable.
                versions[:] = [v for v in versions if v.timestamp_micros != cell.timestamp_micros]
                versions.append(cell)
                versions.sort(key=lambda v: v.timestamp_micros, reverse=True)
            self._persist()

    def read_row(self, row_key: str) -> Optional[Dict[str, List[Cell]]]:
        with self._lock:
            row = self._rows.get(row_key)
            if row is None:
                return None
            return {column: list(versions) for column, versions in row.items()}

    def scan(self) -> _Rows:
        """Return a copy of every stored row."""

        with self._lock:
            return {
                row_key: {column: list(versions) for column, versions in row.items()}
                for row_key, row in self._rows.items()
            }

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            row_key: {
                column: [
                    {
                        "value": base64.b64encode(cell.value).decode("ascii"),
                        "timestamp_micros": cell.timestamp_micros,
                    }
                    for cell in versions
                ]
                for column, versions in row.items()
            }
            for row_key, row in self._rows.items()
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for row_key, columns in data.items():
            row = self._rows.setdefault(row_key, {})
            for qualified, versions in columns.items():
                family, _, column = qualified.partition(":")
                row[qualified] = [
                    Cell(
                        family=family,
                        column=column,
                        value=base64.b64decode(version["value"]),
                        timestamp_micros=int(version["timestamp_micros"]),
                    )
                    for version in versions
                ]
