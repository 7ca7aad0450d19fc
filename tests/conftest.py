from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from sentinel_rover.config import SentinelConfig


class RecordingObserver:
    """Observer that keeps every message it is sent."""

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self.messages: list[dict[str, Any]] = []
        self.closed = False

    @property
    def session_id(self) -> str:
        return self._session_id

    async def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    async def close(self) -> None:
        self.closed = True

    def events(self) -> list[str]:
        return [message["event"] for message in self.messages]

    def payloads(self, event: str) -> list[Any]:
        return [message["data"] for message in self.messages if message["event"] == event]


class BlockedObserver(RecordingObserver):
    """Observer whose sends hang until ``release`` is set."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.release = asyncio.Event()

    async def send(self, message: dict[str, Any]) -> None:
        await self.release.wait()
        await super().send(message)


class BrokenObserver(RecordingObserver):
    async def send(self, message: dict[str, Any]) -> None:
        raise ConnectionResetError("peer went away")


@pytest.fixture
def make_observer() -> Callable[..., RecordingObserver]:
    kinds: dict[str, type[RecordingObserver]] = {
        "recording": RecordingObserver,
        "blocked": BlockedObserver,
        "broken": BrokenObserver,
    }

    def _make(session_id: str, kind: str = "recording") -> RecordingObserver:
        return kinds[kind](session_id)

    return _make


@pytest.fixture
def quiet_config() -> SentinelConfig:
    """No simulation, no responder latency."""
    return SentinelConfig(simulation_enabled=False, channel_latency=0.0, random_seed=7)
