"""Publishing of synthetic climate readings onto a Pub/Sub topic."""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Dict, Optional

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import pubsub_v1
from pydantic_core import PydanticSerializationError

from app.schemas import Reading

logger = logging.getLogger(__name__)

SAMPLE_READING = Reading(
    state="IL",
    county="Will",
    city="Joliet",
    pollution_index=100,
    temperature=39.6,
    air_pressure=30.0,
    week_of_year=1,
    year=2023,
)


class PublishError(RuntimeError):
    """Raised when a reading could not be serialized or handed to Pub/Sub."""


def encode_reading(reading: Reading) -> bytes:
    """Serialize ``reading`` to the JSON interchange format."""
    try:
        return reading.model_dump_json(by_alias=True).encode("utf-8")
    except PydanticSerializationError as exc:
        raise PublishError(f"Unable to serialize reading: {exc}") from exc


def build_push_envelope(reading: Reading, message_id: str, subscription: str) -> Dict[str, Any]:
    """Wrap ``reading`` the way a push subscription delivers it."""
    return {
        "message": {
            "data": base64.b64encode(encode_reading(reading)).decode("ascii"),
            "id": message_id,
        },
        "subscription": subscription,
    }


class ReadingPublisher:
    """Publishes one reading per call and waits for the server-assigned id."""

    def __init__(
        self,
        project: str,
        topic: str,
        client: Optional[Any] = None,
        client_factory: Callable[[], Any] = pubsub_v1.PublisherClient,
    ) -> None:
        self.project = project
        self.topic = topic
        self._client = client
        self._client_factory = client_factory
        self._owns_client = client is None

    def publish(self, reading: Reading) -> str:
        payload = encode_reading(reading)
        client = self._get_client()
        topic_path = client.topic_path(self.project, self.topic)
        try:
            future = client.publish(topic_path, payload)
            message_id = future.result()
        except core_exceptions.GoogleAPIError as exc:
            raise PublishError(
                f"Error occurred when publishing the message and obtaining a new message id: {exc}"
            ) from exc
        logger.info("Published reading", extra={"topic": topic_path, "message_id": message_id})
        return message_id

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.stop()
            self._client = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                self._client = self._client_factory()
            except (core_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
                raise PublishError(f"Error occurred when obtaining a new client: {exc}") from exc
        return self._client
