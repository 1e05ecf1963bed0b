"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


COLUMN_FAMILY = "climate_summary"


class PollutionStatus(str, Enum):
    """Human readable severity stored in the ``pollution`` column."""

    severe = "SEVERE"
    moderate = "MODERATE"
    low = "LOW"
    nil = "NIL"


POLLUTION_STATUS_BY_CODE: Mapping[int, PollutionStatus] = MappingProxyType(
    {
        100: PollutionStatus.severe,
        101: PollutionStatus.moderate,
        102: PollutionStatus.low,
        103: PollutionStatus.nil,
    }
)


@dataclass(frozen=True, slots=True)
class Cell:
    """A single cell value written under ``family:column``."""

    family: str
    column: str
    value: bytes
    timestamp_micros: int


@dataclass(frozen=True, slots=True)
class RowMutation:
    """All cells written to one row in a single atomic apply."""

    row_key: str
    cells: Tuple[Cell, ...]
