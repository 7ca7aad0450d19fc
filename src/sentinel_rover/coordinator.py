"""High-level coordinator tying store, dispatch, broadcast, and simulation together."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any

from sentinel_rover.config import SentinelConfig
from sentinel_rover.dispatch import Dispatcher, default_responders
from sentinel_rover.hub import BroadcastHub, Observer
from sentinel_rover.models.alert import Alert, AlertRequest, AlertSummary, Location
from sentinel_rover.models.status import RoverStatus, StatusUpdate
from sentinel_rover.models.system import HealthReport, LaserResult
from sentinel_rover.models.threat import ResponderChannel, Threat, ThreatReport, ThreatSummary
from sentinel_rover.simulation import TelemetryDriver, ThreatDriver, random_distance, random_nearby
from sentinel_rover.state.events import EventName
from sentinel_rover.state.policy import should_escalate
from sentinel_rover.state.store import RoverStore

_logger = logging.getLogger(__name__)


def _driver_rng(seed: int | None, offset: int) -> random.Random:
    """One generator per driver, derived from the configured seed."""
    return random.Random(None if seed is None else seed + offset)


class RoverCoordinator:
    """Single entry point for every operation on the rover.

    Usage::

        async with RoverCoordinator(SentinelConfig.from_env()) as coordinator:
            threat = await coordinator.report_threat(ThreatReport(severity="high"))

    Entering the context starts the simulation drivers (when enabled);
    leaving it stops them and closes every observer.
    """

    def __init__(
        self,
        config: SentinelConfig | None = None,
        *,
        store: RoverStore | None = None,
        dispatcher: Dispatcher | None = None,
        hub: BroadcastHub | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or SentinelConfig()
        seed = self._config.random_seed
        self._rng = rng or random.Random(seed)
        self._store = store or RoverStore(self._config.initial_status)
        self._dispatcher = dispatcher or Dispatcher(
            default_responders(latency=self._config.channel_latency),
            channel_timeout=self._config.channel_timeout,
        )
        self._hub = hub or BroadcastHub(
            self._store,
            recent_threats_limit=self._config.recent_threats_limit,
            queue_size=self._config.observer_queue_size,
        )
        self._telemetry_driver = TelemetryDriver(
            self._store,
            self._hub,
            interval=self._config.telemetry_interval,
            rng=_driver_rng(seed, 1),
        )
        self._threat_driver = ThreatDriver(
            self._store,
            self.register_threat,
            interval=self._config.threat_interval,
            probability=self._config.threat_probability,
            rng=_driver_rng(seed, 2),
        )

    @property
    def config(self) -> SentinelConfig:
        return self._config

    @property
    def store(self) -> RoverStore:
        return self._store

    @property
    def hub(self) -> BroadcastHub:
        return self._hub

    @property
    def telemetry_driver(self) -> TelemetryDriver:
        return self._telemetry_driver

    @property
    def threat_driver(self) -> ThreatDriver:
        return self._threat_driver

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RoverCoordinator:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    def start(self) -> None:
        if not self._config.simulation_enabled:
            _logger.info("Simulation disabled")
            return
        self._telemetry_driver.start()
        self._threat_driver.start()

    async def stop(self) -> None:
        await self._telemetry_driver.stop()
        await self._threat_driver.stop()
        await self._hub.close()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> RoverStatus:
        return self._store.get_status()

    def update_status(self, update: StatusUpdate | Mapping[str, Any]) -> RoverStatus:
        """Merge a partial update and broadcast the new snapshot."""
        status = self._store.merge_status(update)
        self._hub.publish(EventName.ROVER_STATUS, status)
        return status

    def health(self) -> HealthReport:
        return HealthReport(rover=self._store.get_status())

    # ------------------------------------------------------------------
    # Threats
    # ------------------------------------------------------------------

    async def report_threat(self, report: ThreatReport | Mapping[str, Any] | None = None) -> Threat:
        """Fill in missing report fields, then escalate, store, and broadcast."""
        if report is None:
            report = ThreatReport()
        elif not isinstance(report, ThreatReport):
            report = ThreatReport.model_validate(dict(report))

        latitude, longitude = report.latitude, report.longitude
        if latitude is None or longitude is None:
            near_lat, near_lon = random_nearby(self._store.get_status(), self._rng)
            latitude = near_lat if latitude is None else latitude
            longitude = near_lon if longitude is None else longitude
        distance = report.distance if report.distance is not None else random_distance(self._rng)

        threat = Threat(
            severity=report.severity,
            latitude=latitude,
            longitude=longitude,
            distance=distance,
        )
        return await self.register_threat(threat)

    async def register_threat(self, threat: Threat) -> Threat:
        """Escalate *threat* if its severity warrants it, then store and broadcast.

        ``alerts_sent`` is final before the threat is stored, so no reader
        or observer ever sees a threat with escalation still pending.
        """
        alerts_sent: tuple[ResponderChannel, ...] = ()
        if should_escalate(threat.severity):
            alerts_sent = await self._dispatcher.dispatch(threat)
        threat = threat.model_copy(update={"alerts_sent": alerts_sent})

        stored = self._store.add_threat(threat)
        self._hub.publish(EventName.THREAT_DETECTED, stored)
        _logger.info(
            "Threat %s severity=%s alerts_sent=%s",
            stored.id,
            stored.severity,
            [str(channel) for channel in stored.alerts_sent],
        )
        return stored

    def list_threats(self) -> ThreatSummary:
        return ThreatSummary.from_threats(self._store.get_threats())

    def neutralize_threat(self, threat_id: str) -> Threat:
        """Mark a threat neutralized and broadcast its id.

        Raises
        ------
        ThreatNotFoundError
            If *threat_id* is unknown. Nothing is broadcast.
        """
        threat = self._store.neutralize(threat_id)
        self._hub.publish(EventName.THREAT_NEUTRALIZED, {"id": threat.id})
        _logger.info("Threat %s neutralized", threat.id)
        return threat

    # ------------------------------------------------------------------
    # Manual alerts
    # ------------------------------------------------------------------

    async def dispatch_alert(self, request: AlertRequest | Mapping[str, Any] | None = None) -> Alert:
        """Dispatch a manual alert to responders and record it.

        Manual alerts are returned to the caller only; observers are not
        notified.
        """
        if request is None:
            request = AlertRequest()
        elif not isinstance(request, AlertRequest):
            request = AlertRequest.model_validate(dict(request))

        location = request.location
        if location is None:
            status = self._store.get_status()
            location = Location(latitude=status.latitude, longitude=status.longitude)

        alert = Alert(type=request.type, location=location, message=request.message)
        dispatched_to = await self._dispatcher.dispatch(alert)
        alert = alert.model_copy(update={"dispatched_to": dispatched_to})
        return self._store.add_alert(alert)

    def list_alerts(self) -> AlertSummary:
        alerts = self._store.get_alerts()
        return AlertSummary(total=len(alerts), alerts=alerts)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def connect(self, observer: Observer) -> None:
        self._hub.on_connect(observer)

    def disconnect(self, session_id: str) -> None:
        self._hub.on_disconnect(session_id)

    def fire_laser(self, session_id: str, target: Any) -> LaserResult:
        """Acknowledge a laser request to the requesting observer only."""
        _logger.info("Laser fired at target %r by %s", target, session_id)
        result = LaserResult(success=True, target=target)
        self._hub.send_to(session_id, EventName.LASER_RESULT, result)
        return result
