"""Rover telemetry status model."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sentinel_rover.models._base import SentinelModel


class RoverState(enum.StrEnum):
    """Operational state reported by the field unit."""

    ACTIVE = "ACTIVE"
    IDLE = "IDLE"
    CHARGING = "CHARGING"
    OFFLINE = "OFFLINE"


class LaserStatus(enum.StrEnum):
    """Countermeasure laser readiness."""

    READY = "READY"
    CHARGING = "CHARGING"
    FIRING = "FIRING"
    OFFLINE = "OFFLINE"


class RoverStatus(SentinelModel):
    """Full telemetry snapshot of the field unit.

    Parameters
    ----------
    status : RoverState
        Operational state.
    battery : float
        Battery charge in percent, 0-100.
    laser_status : LaserStatus
        Laser readiness.
    latitude, longitude : float
        Position in degrees.
    temperature : float
        Core temperature in °C.
    cpu_usage, ram_usage : float
        Onboard computer load in percent.
    distance_traveled : float
        Cumulative odometry in meters.
    """

    status: RoverState = RoverState.ACTIVE
    battery: float = Field(default=85.0, ge=0.0, le=100.0)
    laser_status: LaserStatus = LaserStatus.READY
    latitude: float = 13.0827
    longitude: float = 80.2707
    temperature: float = 45.0
    cpu_usage: float = Field(default=42.0, ge=0.0, le=100.0)
    ram_usage: float = Field(default=68.0, ge=0.0, le=100.0)
    distance_traveled: float = Field(default=0.0, ge=0.0)

    def merged(self, patch: dict[str, Any]) -> RoverStatus:
        """Return a validated copy with the keys of *patch* overwritten."""
        if not patch:
            return self
        data = self.model_dump()
        data.update(patch)
        return RoverStatus.model_validate(data)


class StatusUpdate(BaseModel):
    """Partial status update.

    Only fields the caller explicitly supplies are applied; everything
    else keeps its stored value. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    status: RoverState | None = None
    battery: float | None = Field(default=None, ge=0.0, le=100.0)
    laser_status: LaserStatus | None = None
    latitude: float | None = None
    longitude: float | None = None
    temperature: float | None = None
    cpu_usage: float | None = Field(default=None, ge=0.0, le=100.0)
    ram_usage: float | None = Field(default=None, ge=0.0, le=100.0)
    distance_traveled: float | None = Field(default=None, ge=0.0)

    def to_patch(self) -> dict[str, Any]:
        """Fields that were explicitly set, with ``None`` values dropped."""
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}
