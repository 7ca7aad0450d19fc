"""Health and laser acknowledgement models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from sentinel_rover.models._base import SentinelModel, UtcTimestamp, utcnow
from sentinel_rover.models.status import RoverStatus


class HealthReport(SentinelModel):
    status: str = "online"
    timestamp: UtcTimestamp = Field(default_factory=utcnow)
    rover: RoverStatus


class LaserResult(SentinelModel):
    """Simulated acknowledgement of a ``fire_laser`` request.

    Sent back to the requesting observer only. ``target`` echoes the
    request payload verbatim.
    """

    success: bool = True
    target: Any = None
    timestamp: UtcTimestamp = Field(default_factory=utcnow)
