"""Responder channel implementations.

A responder is the integration point for one external service. The
simulated responders log the notification and sleep for a fixed
latency; a real integration replaces :meth:`Responder.notify`, not the
dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from sentinel_rover._constants import DEFAULT_CHANNEL_LATENCY
from sentinel_rover.models.alert import Alert
from sentinel_rover.models.threat import ResponderChannel, Threat

_logger = logging.getLogger(__name__)

_LOG_LABELS: dict[ResponderChannel, str] = {
    ResponderChannel.POLICE: "POLICE ALERT",
    ResponderChannel.FIRE: "FIRE DEPARTMENT ALERT",
    ResponderChannel.MEDICAL: "MEDICAL ALERT",
}


class Responder(Protocol):
    channel: ResponderChannel

    async def notify(self, entity: Threat | Alert) -> bool: ...


def notification_payload(channel: ResponderChannel, entity: Threat | Alert) -> dict[str, Any]:
    """Body a responder service would receive for *entity*."""
    if isinstance(entity, Threat):
        payload: dict[str, Any] = {
            "threat_id": entity.id,
            "severity": str(entity.severity),
            "location": {"lat": entity.latitude, "lng": entity.longitude},
        }
        if channel == ResponderChannel.POLICE:
            payload["message"] = f"Hostile drone detected - {entity.severity} threat level"
        return payload
    return {
        "alert_id": entity.id,
        "type": entity.type,
        "location": {"lat": entity.location.latitude, "lng": entity.location.longitude},
        "message": entity.message,
    }


class SimulatedResponder:
    """Responder that always succeeds after a fixed delay."""

    def __init__(self, channel: ResponderChannel, *, latency: float = DEFAULT_CHANNEL_LATENCY) -> None:
        self.channel = channel
        self._latency = latency

    async def notify(self, entity: Threat | Alert) -> bool:
        _logger.info("[%s] %s", _LOG_LABELS[self.channel], notification_payload(self.channel, entity))
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        return True

    def __repr__(self) -> str:
        return f"SimulatedResponder({self.channel!s}, latency={self._latency})"


def default_responders(*, latency: float = DEFAULT_CHANNEL_LATENCY) -> dict[ResponderChannel, Responder]:
    return {channel: SimulatedResponder(channel, latency=latency) for channel in ResponderChannel}
