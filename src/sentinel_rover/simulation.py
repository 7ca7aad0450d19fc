"""Periodic simulation drivers.

Two independent loops stand in for the rover's sensors: one drifts the
telemetry, the other occasionally detects a threat. Neither keeps state
between ticks beyond its random generator, and a failing tick is logged
and skipped rather than stopping the loop.
"""

from __future__ import annotations

import abc
import asyncio
import contextlib
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from sentinel_rover._constants import (
    BATTERY_DRAIN_PER_TICK,
    CPU_USAGE_BAND,
    DEFAULT_TELEMETRY_INTERVAL,
    DEFAULT_THREAT_INTERVAL,
    DEFAULT_THREAT_PROBABILITY,
    MAX_MOVEMENT_PER_TICK_M,
    MAX_THREAT_DISTANCE_M,
    POSITION_JITTER_DEG,
    RAM_USAGE_BAND,
    TEMPERATURE_BAND,
    THREAT_OFFSET_DEG,
)
from sentinel_rover.hub import BroadcastHub
from sentinel_rover.models.status import RoverStatus
from sentinel_rover.models.threat import Severity, Threat
from sentinel_rover.state.events import EventName
from sentinel_rover.state.store import RoverStore

_logger = logging.getLogger(__name__)


def random_nearby(status: RoverStatus, rng: random.Random) -> tuple[float, float]:
    """A position within ``THREAT_OFFSET_DEG`` of the rover, in any direction."""
    return (
        status.latitude + rng.uniform(-THREAT_OFFSET_DEG, THREAT_OFFSET_DEG),
        status.longitude + rng.uniform(-THREAT_OFFSET_DEG, THREAT_OFFSET_DEG),
    )


def random_distance(rng: random.Random) -> float:
    return rng.uniform(0.0, MAX_THREAT_DISTANCE_M)


def telemetry_patch(status: RoverStatus, rng: random.Random) -> dict[str, Any]:
    """Next telemetry values derived from *status*.

    Load and temperature are drawn fresh from their bands each tick;
    battery, odometry, and position move relative to the current value.
    """
    return {
        "battery": max(0.0, status.battery - BATTERY_DRAIN_PER_TICK),
        "cpu_usage": rng.uniform(*CPU_USAGE_BAND),
        "ram_usage": rng.uniform(*RAM_USAGE_BAND),
        "temperature": rng.uniform(*TEMPERATURE_BAND),
        "distance_traveled": status.distance_traveled + rng.uniform(0.0, MAX_MOVEMENT_PER_TICK_M),
        "latitude": status.latitude + (rng.random() - 0.5) * POSITION_JITTER_DEG,
        "longitude": status.longitude + (rng.random() - 0.5) * POSITION_JITTER_DEG,
    }


class PeriodicDriver(abc.ABC):
    """Run :meth:`tick` every *interval* seconds on its own task."""

    name = "driver"

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @abc.abstractmethod
    async def tick(self) -> Any:
        """One simulation step."""

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"sim-{self.name}")
        _logger.debug("Started %s driver (interval=%ss)", self.name, self._interval)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Stopped %s driver", self.name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.tick()
            except Exception:
                _logger.exception("%s tick failed", self.name)


class TelemetryDriver(PeriodicDriver):
    """Drain the battery, move the rover, and refresh load readings."""

    name = "telemetry"

    def __init__(
        self,
        store: RoverStore,
        hub: BroadcastHub,
        *,
        interval: float = DEFAULT_TELEMETRY_INTERVAL,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(interval)
        self._store = store
        self._hub = hub
        self._rng = rng or random.Random()

    async def tick(self) -> RoverStatus:
        status = self._store.update_status(lambda current: telemetry_patch(current, self._rng))
        self._hub.publish(EventName.ROVER_STATUS, status)
        return status


class ThreatDriver(PeriodicDriver):
    """Occasionally synthesize a threat near the rover.

    *register* is the same escalation path ingress reports use; it
    escalates, stores, and publishes the threat.
    """

    name = "threat"

    def __init__(
        self,
        store: RoverStore,
        register: Callable[[Threat], Awaitable[Threat]],
        *,
        interval: float = DEFAULT_THREAT_INTERVAL,
        probability: float = DEFAULT_THREAT_PROBABILITY,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(interval)
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        self._store = store
        self._register = register
        self._probability = probability
        self._rng = rng or random.Random()

    def synthesize(self) -> Threat:
        latitude, longitude = random_nearby(self._store.get_status(), self._rng)
        return Threat(
            severity=self._rng.choice(list(Severity)),
            latitude=latitude,
            longitude=longitude,
            distance=random_distance(self._rng),
        )

    async def tick(self) -> Threat | None:
        if self._rng.random() >= self._probability:
            return None
        threat = self.synthesize()
        _logger.debug("Simulated %s threat %s", threat.severity, threat.id)
        return await self._register(threat)
