"""Base model and shared field types.

Every record the coordinator hands out inherits from :class:`SentinelModel`
which provides:

* ``frozen=True`` so a returned record is a snapshot: callers can keep it
  without further locking while the store moves on.
* ``populate_by_name=True`` and ``extra="ignore"`` so request bodies with
  unknown keys are accepted and the extras dropped.

Timestamps use :data:`UtcTimestamp`, which coerces naive datetimes and
ISO strings to timezone-aware UTC values.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """Return a fresh random identifier for a threat or alert."""
    return str(uuid.uuid4())


def parse_utc_timestamp(value: Any) -> datetime | None:
    """Coerce *value* to a timezone-aware UTC datetime.

    Accepts ``None``, datetimes (naive ones are assumed UTC), ISO-8601
    strings, and epoch seconds.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return value


UtcTimestamp = Annotated[datetime, BeforeValidator(parse_utc_timestamp)]
"""Annotated type that normalizes datetimes, ISO strings, and epochs to UTC."""


class SentinelModel(BaseModel):
    """Base for immutable rover, threat, and alert records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict used for HTTP responses and broadcast events."""
        return self.model_dump(mode="json")
