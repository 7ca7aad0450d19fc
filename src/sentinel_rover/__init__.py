"""sentinel_rover - Defense-rover telemetry and threat-alert coordinator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sentinel-rover")
except PackageNotFoundError:
    __version__ = "0+local"
from sentinel_rover.config import SentinelConfig
from sentinel_rover.coordinator import RoverCoordinator
from sentinel_rover.dispatch import Dispatcher, Responder, SimulatedResponder, default_responders
from sentinel_rover.exceptions import (
    ChannelDispatchError,
    ObserverDeliveryError,
    SentinelConfigError,
    SentinelError,
    ThreatNotFoundError,
)
from sentinel_rover.hub import BroadcastHub, Observer
from sentinel_rover.models import (
    Alert,
    AlertRequest,
    AlertSummary,
    HealthReport,
    LaserResult,
    LaserStatus,
    Location,
    ResponderChannel,
    RoverState,
    RoverStatus,
    Severity,
    StatusUpdate,
    Threat,
    ThreatReport,
    ThreatSummary,
)
from sentinel_rover.state.events import BroadcastEvent, EventName
from sentinel_rover.state.policy import decide_channels, should_escalate
from sentinel_rover.state.store import RoverStore

__all__ = [
    "__version__",
    "Alert",
    "AlertRequest",
    "AlertSummary",
    "BroadcastEvent",
    "BroadcastHub",
    "ChannelDispatchError",
    "Dispatcher",
    "EventName",
    "HealthReport",
    "LaserResult",
    "LaserStatus",
    "Location",
    "Observer",
    "ObserverDeliveryError",
    "Responder",
    "ResponderChannel",
    "RoverCoordinator",
    "RoverState",
    "RoverStatus",
    "RoverStore",
    "SentinelConfig",
    "SentinelConfigError",
    "SentinelError",
    "Severity",
    "SimulatedResponder",
    "StatusUpdate",
    "Threat",
    "ThreatNotFoundError",
    "ThreatReport",
    "ThreatSummary",
    "decide_channels",
    "default_responders",
    "should_escalate",
]
