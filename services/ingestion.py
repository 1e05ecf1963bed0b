"""Ingestion of push notifications into the climate summary table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Mapping

from datastore.base import StorageWriteError, TableStore
from datastore.factory import build_default_table
from models.records import POLLUTION_STATUS_BY_CODE, PollutionStatus
from services.transform import (
    IngestionError,
    bigtable_now_micros,
    build_mutation,
    decode_envelope,
    decode_reading,
    lookup_status,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IngestionResult:
    message_id: str
    subscription: str
    row_key: str
    status: PollutionStatus
    timestamp_micros: int


class IngestionService:
    """Validates one notification and writes it as a single row mutation."""

    def __init__(
        self,
        table: TableStore,
        status_codes: Mapping[int, PollutionStatus] = POLLUTION_STATUS_BY_CODE,
        clock: Callable[[], int] = bigtable_now_micros,
    ) -> None:
        self.table = table
        self.status_codes = status_codes
        self.clock = clock

    def ingest(self, body: bytes) -> IngestionResult:
        """Decode ``body`` and apply one mutation; nothing is written on failure."""
        try:
            envelope = decode_envelope(body)
        except IngestionError as exc:
            logger.warning("Rejecting request body", extra={"reason": str(exc)})
            raise
        message = envelope.message
        context = {"message_id": message.message_id, "subscription": envelope.subscription}

        try:
            reading = decode_reading(message.data)
            status = lookup_status(reading.pollution_index, self.status_codes)
        except IngestionError as exc:
            logger.warning("Rejecting notification", extra={**context, "reason": str(exc)})
            raise

        mutation = build_mutation(reading, status, self.clock())
        try:
            self.table.apply(mutation)
        except StorageWriteError as exc:
            logger.error(
                "Failed to write row",
                extra={**context, "row_key": mutation.row_key, "table": self.table.name, "reason": str(exc)},
            )
            raise

        logger.info(
            "Stored climate reading",
            extra={
                **context,
                "row_key": mutation.row_key,
                "pollution_index": reading.pollution_index,
                "status": status.value,
            },
        )
        return IngestionResult(
            message_id=message.message_id,
            subscription=envelope.subscription,
            row_key=mutation.row_key,
            status=status,
            timestamp_micros=mutation.cells[0].timestamp_micros,
        )


@lru_cache
def build_default_ingestion_service() -> IngestionService:
    """Factory that wires the ingestion service with the configured table."""
    return IngestionService(table=build_default_table())
