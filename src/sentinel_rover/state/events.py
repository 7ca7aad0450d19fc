"""Broadcast event catalog.

Every state change the coordinator commits is announced as one of these
events. Only the broadcast hub delivers them to observers.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventName(StrEnum):
    ROVER_STATUS = "rover_status"
    THREAT_DETECTED = "threat_detected"
    THREAT_NEUTRALIZED = "threat_neutralized"
    RECENT_THREATS = "recent_threats"
    LASER_RESULT = "laser_result"
    # Inbound only: observers send this to request a laser acknowledgement.
    FIRE_LASER = "fire_laser"


class BroadcastEvent(BaseModel):
    """A typed event addressed to one or all observers."""

    model_config = ConfigDict(frozen=True)

    name: EventName
    data: Any = Field(default=None, description="JSON-ready payload")

    @field_validator("data", mode="before")
    @classmethod
    def _dump_models(cls, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, (list, tuple)):
            return [item.model_dump(mode="json") if isinstance(item, BaseModel) else item for item in value]
        return value

    def to_message(self) -> dict[str, Any]:
        """Wire shape sent to observers: ``{"event": name, "data": payload}``."""
        return {"event": str(self.name), "data": self.data}
