"""Deterministic escalation policy.

This module decides *which* responder channels to ask; it never performs
a notification. Whether a channel ends up in ``alerts_sent`` depends on
the dispatcher reporting success for it.
"""

from __future__ import annotations

from sentinel_rover.models.alert import Alert
from sentinel_rover.models.threat import ResponderChannel, Severity, Threat

ESCALATING_SEVERITIES: frozenset[Severity] = frozenset({Severity.HIGH, Severity.CRITICAL})


def should_escalate(severity: Severity) -> bool:
    """Only high and critical threats are escalated to responders."""
    return severity in ESCALATING_SEVERITIES


def decide_channels(entity: Threat | Alert) -> tuple[ResponderChannel, ...]:
    """Return the channels to notify, in notification order.

    Policy:
    - Police is asked for every threat and alert.
    - Fire is asked only for critical threats.
    - Medical is asked for every threat and alert.

    The order here is the order of ``alerts_sent`` / ``dispatched_to``.
    """
    channels = [ResponderChannel.POLICE]
    if isinstance(entity, Threat) and entity.severity == Severity.CRITICAL:
        channels.append(ResponderChannel.FIRE)
    channels.append(ResponderChannel.MEDICAL)
    return tuple(channels)
