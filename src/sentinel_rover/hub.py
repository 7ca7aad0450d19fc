"""Broadcast fan-out to connected observers.

Each observer gets its own bounded queue and writer task, so a slow or
broken connection only ever delays itself. :meth:`BroadcastHub.publish`
never awaits.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from sentinel_rover._constants import OBSERVER_QUEUE_SIZE, RECENT_THREATS_LIMIT
from sentinel_rover.exceptions import ObserverDeliveryError
from sentinel_rover.state.events import BroadcastEvent, EventName
from sentinel_rover.state.store import RoverStore

_logger = logging.getLogger(__name__)

# rover_status and recent_threats, queued on connect.
_SNAPSHOT_EVENTS = 2


class Observer(Protocol):
    """Transport-independent connection capability."""

    @property
    def session_id(self) -> str: ...

    async def send(self, message: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


@dataclass(slots=True)
class _ObserverSession:
    observer: Observer
    queue: asyncio.Queue[BroadcastEvent]
    writer: asyncio.Task[None] | None = field(default=None)


class BroadcastHub:
    """Registry of connected observers.

    Parameters
    ----------
    store : RoverStore
        Source of the snapshot sent to newly connected observers.
    recent_threats_limit : int
        How many of the latest threats a new observer receives.
    queue_size : int
        Pending events allowed per observer before it is dropped, not
        counting the connect snapshot.
    """

    def __init__(
        self,
        store: RoverStore,
        *,
        recent_threats_limit: int = RECENT_THREATS_LIMIT,
        queue_size: int = OBSERVER_QUEUE_SIZE,
    ) -> None:
        self._store = store
        self._recent_threats_limit = recent_threats_limit
        self._queue_size = queue_size
        self._sessions: dict[str, _ObserverSession] = {}
        self._closing: set[asyncio.Task[None]] = set()

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_connect(self, observer: Observer) -> None:
        """Register *observer* and queue its initial snapshot.

        The observer receives ``rover_status`` then ``recent_threats``
        before any event published after this call.
        """
        session_id = observer.session_id
        if session_id in self._sessions:
            self.on_disconnect(session_id)

        session = _ObserverSession(observer=observer, queue=asyncio.Queue(maxsize=self._queue_size + _SNAPSHOT_EVENTS))
        session.queue.put_nowait(BroadcastEvent(name=EventName.ROVER_STATUS, data=self._store.get_status()))
        session.queue.put_nowait(
            BroadcastEvent(
                name=EventName.RECENT_THREATS,
                data=list(self._store.recent_threats(self._recent_threats_limit)),
            )
        )
        session.writer = asyncio.get_running_loop().create_task(
            self._write_loop(session), name=f"observer-writer-{session_id}"
        )
        self._sessions[session_id] = session
        _logger.info("Observer connected: %s (total=%d)", session_id, len(self._sessions))

    def on_disconnect(self, session_id: str) -> None:
        """Forget *session_id*; events still queued for it are discarded."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        if session.writer is not None and session.writer is not asyncio.current_task():
            session.writer.cancel()
        _flush(session.queue)
        _logger.info("Observer disconnected: %s (total=%d)", session_id, len(self._sessions))

    async def close(self) -> None:
        """Disconnect and close every observer."""
        sessions = list(self._sessions.values())
        for session in sessions:
            self.on_disconnect(session.observer.session_id)
        for session in sessions:
            if session.writer is not None:
                with contextlib.suppress(asyncio.CancelledError):
                    await session.writer
            await self._close_observer(session.observer)
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def publish(self, name: EventName, data: Any = None) -> BroadcastEvent:
        """Queue an event for every connected observer and return it."""
        event = BroadcastEvent(name=name, data=data)
        for session in list(self._sessions.values()):
            self._enqueue(session, event)
        _logger.debug("Published %s to %d observer(s)", name, len(self._sessions))
        return event

    def send_to(self, session_id: str, name: EventName, data: Any = None) -> bool:
        """Queue an event for a single observer. Returns ``False`` if it is gone."""
        session = self._sessions.get(session_id)
        if session is None:
            _logger.debug("Dropping %s for unknown observer %s", name, session_id)
            return False
        return self._enqueue(session, BroadcastEvent(name=name, data=data))

    async def drain(self) -> None:
        """Wait until every observer has been handed all queued events."""
        await asyncio.gather(*(session.queue.join() for session in list(self._sessions.values())))

    def _enqueue(self, session: _ObserverSession, event: BroadcastEvent) -> bool:
        try:
            session.queue.put_nowait(event)
        except asyncio.QueueFull:
            self._drop(
                session,
                ObserverDeliveryError("observer queue overflow", session_id=session.observer.session_id),
            )
            return False
        return True

    async def _write_loop(self, session: _ObserverSession) -> None:
        observer = session.observer
        while True:
            event = await session.queue.get()
            try:
                await observer.send(event.to_message())
            except Exception as exc:
                self._drop(
                    session,
                    ObserverDeliveryError(f"send failed: {exc!r}", session_id=observer.session_id),
                )
                return
            finally:
                session.queue.task_done()

    def _drop(self, session: _ObserverSession, error: ObserverDeliveryError) -> None:
        session_id = session.observer.session_id
        if self._sessions.get(session_id) is not session:
            return
        _logger.warning("Dropping observer %s: %s", session_id, error)
        self.on_disconnect(session_id)
        task = asyncio.get_running_loop().create_task(self._close_observer(session.observer))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    @staticmethod
    async def _close_observer(observer: Observer) -> None:
        try:
            await observer.close()
        except Exception:
            _logger.debug("Closing observer %s failed", observer.session_id, exc_info=True)


def _flush(queue: asyncio.Queue[BroadcastEvent]) -> None:
    """Discard pending events, keeping ``join()`` waiters unblocked."""
    while True:
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            return
        queue.task_done()
