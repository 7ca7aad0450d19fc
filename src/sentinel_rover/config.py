"""Coordinator configuration for sentinel_rover."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from sentinel_rover._constants import (
    DEFAULT_CHANNEL_LATENCY,
    DEFAULT_PORT,
    DEFAULT_TELEMETRY_INTERVAL,
    DEFAULT_THREAT_INTERVAL,
    DEFAULT_THREAT_PROBABILITY,
    OBSERVER_QUEUE_SIZE,
    RECENT_THREATS_LIMIT,
)
from sentinel_rover.exceptions import SentinelConfigError
from sentinel_rover.models.status import RoverStatus


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SentinelConfig:
    """Coordinator configuration.

    Parameters
    ----------
    host : str
        Interface the ingress server binds to.
    port : int
        Ingress server port.
    simulation_enabled : bool
        Run the telemetry and threat simulation drivers.
    telemetry_interval : float
        Seconds between telemetry ticks.
    threat_interval : float
        Seconds between threat-synthesis ticks.
    threat_probability : float
        Chance that a threat tick produces a threat.
    channel_latency : float
        Simulated responder latency in seconds.
    channel_timeout : float or None
        Per-channel deadline. A responder that exceeds it is recorded as
        failed. ``None`` waits indefinitely.
    recent_threats_limit : int
        Threats sent to a newly connected observer.
    observer_queue_size : int
        Pending events per observer before it is dropped.
    random_seed : int or None
        Seed for the simulation random generator.
    initial_status : RoverStatus
        Status the store starts with.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    simulation_enabled: bool = True
    telemetry_interval: float = DEFAULT_TELEMETRY_INTERVAL
    threat_interval: float = DEFAULT_THREAT_INTERVAL
    threat_probability: float = DEFAULT_THREAT_PROBABILITY
    channel_latency: float = DEFAULT_CHANNEL_LATENCY
    channel_timeout: float | None = None
    recent_threats_limit: int = RECENT_THREATS_LIMIT
    observer_queue_size: int = OBSERVER_QUEUE_SIZE
    random_seed: int | None = None
    initial_status: RoverStatus = dataclasses.field(default_factory=RoverStatus)

    def __post_init__(self) -> None:
        if self.telemetry_interval <= 0 or self.threat_interval <= 0:
            raise SentinelConfigError("simulation intervals must be positive")
        if not 0.0 <= self.threat_probability <= 1.0:
            raise SentinelConfigError(f"threat_probability must be within [0, 1], got {self.threat_probability}")
        if self.channel_latency < 0:
            raise SentinelConfigError("channel_latency must not be negative")
        if self.channel_timeout is not None and self.channel_timeout <= 0:
            raise SentinelConfigError("channel_timeout must be positive when set")
        if self.recent_threats_limit < 0:
            raise SentinelConfigError("recent_threats_limit must not be negative")
        if self.observer_queue_size < 1:
            raise SentinelConfigError("observer_queue_size must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> SentinelConfig:
        """Create configuration from environment variables.

        Reads optional ``SENTINEL_*`` variables, plus ``PORT`` as a
        fallback for the port. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SentinelConfig
            Populated configuration.

        Raises
        ------
        SentinelConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_CONVERTERS: dict[str, tuple[str, type]] = {
            "SENTINEL_HOST": ("host", str),
            "SENTINEL_PORT": ("port", int),
            "SENTINEL_TELEMETRY_INTERVAL": ("telemetry_interval", float),
            "SENTINEL_THREAT_INTERVAL": ("threat_interval", float),
            "SENTINEL_THREAT_PROBABILITY": ("threat_probability", float),
            "SENTINEL_CHANNEL_LATENCY": ("channel_latency", float),
            "SENTINEL_CHANNEL_TIMEOUT": ("channel_timeout", float),
            "SENTINEL_RECENT_THREATS_LIMIT": ("recent_threats_limit", int),
            "SENTINEL_OBSERVER_QUEUE_SIZE": ("observer_queue_size", int),
            "SENTINEL_RANDOM_SEED": ("random_seed", int),
        }
        config_kwargs: dict[str, Any] = {}

        # Plain PORT is honoured for parity with common hosting setups.
        if env.get("PORT") is not None:
            _ENV_CONVERTERS = {"PORT": ("port", int), **_ENV_CONVERTERS}

        for env_key, (field_name, convert) in _ENV_CONVERTERS.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise SentinelConfigError(f"Invalid {env_key}={val!r}") from exc

        if "simulation_enabled" not in overrides:
            config_kwargs["simulation_enabled"] = _env_bool(env.get("SENTINEL_SIMULATION_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
