from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from datastore.base import TableStore
from datastore.bigtable import BigtableTable
from datastore.mock_bigtable import MockBigtableTable
from settings import require_service_settings


@lru_cache
def build_default_table(backend: Optional[str] = None) -> TableStore:
    """Build the table store named by ``backend``, or by ``STORE_BACKEND`` when omitted."""
    settings = require_service_settings()
    selected = settings.store_backend if backend is None else backend
    if selected == "memory":
        path = settings.store_persistence_path
        return MockBigtableTable(
            name=settings.table,
            persistence_path=Path(path) if path else None,
        )
    return BigtableTable(
        project=settings.project,
        instance=settings.instance,
        name=settings.table,
    )
