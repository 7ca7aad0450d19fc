"""Custom exception hierarchy for sentinel_rover."""

from __future__ import annotations


class SentinelError(Exception):
    """Base exception for all sentinel_rover errors."""


class SentinelConfigError(SentinelError):
    """Invalid or missing configuration."""


class ThreatNotFoundError(SentinelError, LookupError):
    """No stored threat carries the requested id."""

    def __init__(self, threat_id: str) -> None:
        self.threat_id = threat_id
        super().__init__(f"Threat not found: {threat_id}")


class ChannelDispatchError(SentinelError):
    """A responder channel failed to accept a notification.

    The dispatcher always recovers from this: the channel is logged and
    left out of the ``alerts_sent`` / ``dispatched_to`` list.
    """

    def __init__(self, message: str, *, channel: str = "") -> None:
        self.channel = channel
        super().__init__(message)


class ObserverDeliveryError(SentinelError):
    """An event could not be delivered to a connected observer.

    Raised when a send fails or the observer's pending queue overflows.
    The broadcast hub drops the observer; other observers are unaffected.
    """

    def __init__(self, message: str, *, session_id: str = "") -> None:
        self.session_id = session_id
        super().__init__(message)
