from __future__ import annotations

import httpx
import typer

from app.schemas import Reading
from cli.config import CLIConfig
from services.publisher import build_push_envelope


class AdapterClient:
    """Delivers readings straight to the ingestion adapter, as a push subscription would."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def push_reading(self, reading: Reading, message_id: str) -> int:
        envelope = build_push_envelope(
            reading, message_id=message_id, subscription=self._config.subscription
        )
        try:
            response = self._client.post(self._config.adapter_url, json=envelope)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(
                f"Unable to reach {self._config.adapter_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.status_code

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
