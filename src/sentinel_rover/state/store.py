"""Authoritative in-memory store for rover status, threats, and alerts.

This is the only component allowed to mutate rover state. Every record
it returns is a frozen Pydantic model, so a returned value is a snapshot
that stays valid while the store keeps changing.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from sentinel_rover.exceptions import ThreatNotFoundError
from sentinel_rover.models._base import new_id
from sentinel_rover.models.alert import Alert
from sentinel_rover.models.status import RoverStatus, StatusUpdate
from sentinel_rover.models.threat import Threat, neutralized_copy


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_patch(update: StatusUpdate | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(update, StatusUpdate):
        return update.to_patch()
    return StatusUpdate.model_validate(dict(update)).to_patch()


class RoverStore:
    """In-memory store for a single rover.

    The status record, the threat log, and the alert log each have their
    own lock. No lock is held across an await or across two of them, so
    readers of one collection never wait on writers of another.

    Threats and alerts are append-only; a threat is only ever replaced in
    place by its neutralized copy.
    """

    def __init__(
        self,
        initial_status: RoverStatus | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._status = initial_status if initial_status is not None else RoverStatus()
        self._status_lock = threading.Lock()
        self._threats: list[Threat] = []
        self._threat_index: dict[str, int] = {}
        self._threats_lock = threading.Lock()
        self._alerts: list[Alert] = []
        self._alerts_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> RoverStatus:
        with self._status_lock:
            return self._status

    def merge_status(self, update: StatusUpdate | Mapping[str, Any]) -> RoverStatus:
        """Overwrite only the supplied fields and return the new snapshot.

        The patch is validated before the lock is taken; a rejected patch
        leaves the stored status untouched.
        """
        patch = _as_patch(update)
        with self._status_lock:
            self._status = self._status.merged(patch)
            return self._status

    def update_status(self, mutator: Callable[[RoverStatus], Mapping[str, Any]]) -> RoverStatus:
        """Atomically derive a patch from the current status and apply it.

        *mutator* runs under the status lock and must not block. Used by
        read-modify-write callers (telemetry ticks) so a concurrent merge
        is never lost.
        """
        with self._status_lock:
            patch = dict(mutator(self._status))
            self._status = self._status.merged(patch)
            return self._status

    # ------------------------------------------------------------------
    # Threats
    # ------------------------------------------------------------------

    def add_threat(self, threat: Threat) -> Threat:
        """Append *threat*, assigning an id if it has none."""
        if not threat.id:
            threat = threat.model_copy(update={"id": new_id()})
        with self._threats_lock:
            if threat.id in self._threat_index:
                raise ValueError(f"duplicate threat id: {threat.id}")
            self._threat_index[threat.id] = len(self._threats)
            self._threats.append(threat)
        return threat

    def get_threats(self) -> tuple[Threat, ...]:
        """All threats in insertion order."""
        with self._threats_lock:
            return tuple(self._threats)

    def recent_threats(self, limit: int) -> tuple[Threat, ...]:
        """The last *limit* threats, oldest first."""
        if limit <= 0:
            return ()
        with self._threats_lock:
            return tuple(self._threats[-limit:])

    def find_threat(self, threat_id: str) -> Threat | None:
        with self._threats_lock:
            position = self._threat_index.get(threat_id)
            return self._threats[position] if position is not None else None

    def neutralize(self, threat_id: str) -> Threat:
        """Mark a threat neutralized.

        Not idempotent: neutralizing an already-neutralized threat moves
        ``neutralized_at`` forward to now.

        Raises
        ------
        ThreatNotFoundError
            If no threat has *threat_id*. Nothing is mutated.
        """
        now = self._clock()
        with self._threats_lock:
            position = self._threat_index.get(threat_id)
            if position is None:
                raise ThreatNotFoundError(threat_id)
            updated = neutralized_copy(self._threats[position], now)
            self._threats[position] = updated
            return updated

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def add_alert(self, alert: Alert) -> Alert:
        with self._alerts_lock:
            self._alerts.append(alert)
        return alert

    def get_alerts(self) -> tuple[Alert, ...]:
        with self._alerts_lock:
            return tuple(self._alerts)
