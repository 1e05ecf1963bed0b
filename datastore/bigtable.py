from __future__ import annotations

import logging
from typing import Any, Callable

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud.bigtable.data import BigtableDataClient, SetCell

from datastore.base import StorageWriteError
from models.records import RowMutation

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class BigtableTable:
    """Writes mutations to a Cloud Bigtable table.

    A data client is opened for every ``apply`` call and closed before it
    returns; nothing is pooled or shared between requests.
    """

    def __init__(
        self,
        project: str,
        instance: str,
        name: str,
        client_factory: ClientFactory = BigtableDataClient,
    ) -> None:
        self.project = project
        self.instance = instance
        self.name = name
        self._client_factory = client_factory

    def apply(self, mutation: RowMutation) -> None:
        try:
            client = self._client_factory(project=self.project)
        except (core_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise StorageWriteError(f"bigtable client creation failed: {exc}") from exc

        try:
            table = client.get_table(self.instance, self.name)
            table.mutate_row(
                mutation.row_key,
                [
                    SetCell(
                        family=cell.family,
                        qualifier=cell.column,
                        new_value=cell.value,
                        timestamp_micros=cell.timestamp_micros,
                    )
                    for cell in mutation.cells
                ],
            )
        except core_exceptions.GoogleAPIError as exc:
            raise StorageWriteError(
                f"BigTable write operation has failed with an error: {exc}"
            ) from exc
        finally:
            client.close()
        logger.debug(
            "Applied mutation to Bigtable",
            extra={"row_key": mutation.row_key, "table": self.name},
        )
