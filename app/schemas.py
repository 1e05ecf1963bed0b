"""Pydantic schemas for the wire formats exchanged with Pub/Sub."""

from __future__ import annotations

import base64
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_LINE_BREAKS = str.maketrans("", "", "\r\n")


class Reading(BaseModel):
    """One location and week stamped climate/pollution observation.

    Serialized with the PascalCase field names the publisher and the
    ingestion adapter agree on. Every field is required and numbers must be
    JSON numbers of the right kind: a quoted "100" or an integer field sent
    as 100.0 is rejected.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, strict=True)

    state: str = Field(..., alias="State")
    county: str = Field(..., alias="County")
    city: str = Field(..., alias="City")
    pollution_index: int = Field(..., alias="PollutionIndex")
    temperature: float = Field(..., alias="Temperature", allow_inf_nan=False)
    air_pressure: float = Field(..., alias="AirPressure", allow_inf_nan=False)
    week_of_year: int = Field(..., alias="WeekOfYear")
    year: int = Field(..., alias="Year")


class PushMessage(BaseModel):
    """The ``message`` member of a push notification."""

    model_config = ConfigDict(populate_by_name=True)

    data: bytes = Field(default=b"", description="Serialized reading, base64 on the wire.")
    message_id: str = Field(
        default="",
        validation_alias=AliasChoices("id", "messageId", "message_id"),
    )
    attributes: Dict[str, str] = Field(default_factory=dict)
    publish_time: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("publishTime", "publish_time"),
    )

    @field_validator("data", mode="before")
    @classmethod
    def _decode_base64(cls, value: Any) -> Any:
        if value is None:
            return b""
        if isinstance(value, str):
            # Line breaks are skipped like standard base64 decoders do; any other
            # stray character raises binascii.Error, which pydantic reports.
            return base64.b64decode(value.translate(_LINE_BREAKS), validate=True)
        return value


class PushEnvelope(BaseModel):
    """Notification envelope delivered to the adapter by a push subscription."""

    message: PushMessage
    subscription: str = ""
