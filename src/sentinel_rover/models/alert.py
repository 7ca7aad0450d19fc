"""Manual alert dispatch records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from sentinel_rover._constants import DEFAULT_ALERT_MESSAGE, DEFAULT_ALERT_TYPE
from sentinel_rover.models._base import SentinelModel, UtcTimestamp, new_id, utcnow
from sentinel_rover.models.threat import ResponderChannel


class Location(SentinelModel):
    latitude: float
    longitude: float


class Alert(SentinelModel):
    """A manually dispatched alert. Never mutated after creation."""

    id: str = Field(default_factory=new_id)
    type: str = DEFAULT_ALERT_TYPE
    location: Location
    message: str = DEFAULT_ALERT_MESSAGE
    timestamp: UtcTimestamp = Field(default_factory=utcnow)
    dispatched_to: tuple[ResponderChannel, ...] = ()


class AlertRequest(BaseModel):
    """Manual alert request; ``location`` defaults to the rover position."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    type: str = DEFAULT_ALERT_TYPE
    location: Location | None = None
    message: str = DEFAULT_ALERT_MESSAGE


class AlertSummary(SentinelModel):
    total: int
    alerts: tuple[Alert, ...] = ()
