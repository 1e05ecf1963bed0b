"""Pure decode and transform steps applied to each push notification."""

from __future__ import annotations

import time
from typing import Mapping

from pydantic import ValidationError

from app.schemas import PushEnvelope, Reading
from models.records import COLUMN_FAMILY, Cell, PollutionStatus, RowMutation


class IngestionError(ValueError):
    """Base class for per-request failures caused by the incoming payload."""


class EnvelopeDecodeError(IngestionError):
    pass


class PayloadDecodeError(IngestionError):
    pass


class UnknownPollutionCode(IngestionError):
    def __init__(self, code: int) -> None:
        super().__init__(
            f"No valid pollution status description was found using the code {code}"
        )
        self.code = code


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def decode_envelope(body: bytes) -> PushEnvelope:
    try:
        return PushEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise EnvelopeDecodeError(f"Invalid notification envelope: {_first_error(exc)}") from exc


def decode_reading(data: bytes) -> Reading:
    try:
        return Reading.model_validate_json(data)
    except ValidationError as exc:
        raise PayloadDecodeError(f"Failed to unmarshal the payload: {_first_error(exc)}") from exc


def lookup_status(code: int, status_codes: Mapping[int, PollutionStatus]) -> PollutionStatus:
    status = status_codes.get(code)
    if status is None:
        raise UnknownPollutionCode(code)
    return status


def format_decimal(value: float) -> str:
    """Fixed-point text with six decimals, e.g. ``21.6 -> '21.600000'``."""
    return f"{value:f}"


def build_row_key(reading: Reading) -> str:
    parts = (
        reading.state,
        reading.county,
        reading.city,
        str(reading.year),
        str(reading.week_of_year),
    )
    return "#".join(parts)


def bigtable_now_micros() -> int:
    # Bigtable tables default to millisecond granularity.
    return time.time_ns() // 1_000_000 * 1000


def build_mutation(reading: Reading, status: PollutionStatus, timestamp_micros: int) -> RowMutation:
    values = (
        ("pollution", status.value),
        ("temperature", format_decimal(reading.temperature)),
        ("pressure", format_decimal(reading.air_pressure)),
    )
    cells = tuple(
        Cell(
            family=COLUMN_FAMILY,
            column=column,
            value=text.encode("utf-8"),
            timestamp_micros=timestamp_micros,
        )
        for column, text in values
    )
    return RowMutation(row_key=build_row_key(reading), cells=cells)
