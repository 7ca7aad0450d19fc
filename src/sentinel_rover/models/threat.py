"""Threat records and threat reports."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from sentinel_rover.models._base import SentinelModel, UtcTimestamp, new_id, utcnow


class Severity(enum.StrEnum):
    """Threat severity levels, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ResponderChannel(enum.StrEnum):
    """External responder services that can be notified."""

    POLICE = "Police"
    FIRE = "Fire"
    MEDICAL = "Medical"


class Threat(SentinelModel):
    """A detected threat.

    ``alerts_sent`` is fixed when the threat is created; neutralizing a
    threat never notifies responders again.
    """

    id: str = Field(default_factory=new_id)
    severity: Severity = Severity.MEDIUM
    latitude: float
    longitude: float
    distance: float = Field(ge=0.0)
    timestamp: UtcTimestamp = Field(default_factory=utcnow)
    neutralized: bool = False
    neutralized_at: UtcTimestamp | None = None
    alerts_sent: tuple[ResponderChannel, ...] = ()

    @property
    def is_active(self) -> bool:
        return not self.neutralized


class ThreatReport(BaseModel):
    """Threat report as received at the boundary.

    Missing coordinates and distance are filled in by the coordinator
    relative to the rover's current position.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    severity: Severity = Severity.MEDIUM
    latitude: float | None = None
    longitude: float | None = None
    distance: float | None = Field(default=None, ge=0.0)


class ThreatSummary(SentinelModel):
    """Threat listing with derived counts."""

    total: int
    active: int
    threats: tuple[Threat, ...] = ()

    @classmethod
    def from_threats(cls, threats: tuple[Threat, ...]) -> ThreatSummary:
        return cls(
            total=len(threats),
            active=sum(1 for threat in threats if threat.is_active),
            threats=threats,
        )


def neutralized_copy(threat: Threat, when: datetime) -> Threat:
    """Return *threat* marked neutralized at *when*.

    The timestamp is clamped so it is never earlier than the threat's
    creation time.
    """
    return threat.model_copy(update={"neutralized": True, "neutralized_at": max(when, threat.timestamp)})
