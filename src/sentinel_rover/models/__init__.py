"""Data models for rover state, threats, and alerts."""

from sentinel_rover.models._base import SentinelModel, UtcTimestamp, new_id, parse_utc_timestamp, utcnow
from sentinel_rover.models.alert import Alert, AlertRequest, AlertSummary, Location
from sentinel_rover.models.status import LaserStatus, RoverState, RoverStatus, StatusUpdate
from sentinel_rover.models.system import HealthReport, LaserResult
from sentinel_rover.models.threat import (
    ResponderChannel,
    Severity,
    Threat,
    ThreatReport,
    ThreatSummary,
    neutralized_copy,
)

__all__ = [
    "Alert",
    "AlertRequest",
    "AlertSummary",
    "HealthReport",
    "LaserResult",
    "LaserStatus",
    "Location",
    "ResponderChannel",
    "RoverState",
    "RoverStatus",
    "SentinelModel",
    "Severity",
    "StatusUpdate",
    "Threat",
    "ThreatReport",
    "ThreatSummary",
    "UtcTimestamp",
    "neutralized_copy",
    "new_id",
    "parse_utc_timestamp",
    "utcnow",
]
