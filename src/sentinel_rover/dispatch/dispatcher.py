"""Run escalation decisions against responder channels."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from sentinel_rover.dispatch.responders import Responder
from sentinel_rover.exceptions import ChannelDispatchError
from sentinel_rover.models.alert import Alert
from sentinel_rover.models.threat import ResponderChannel, Threat
from sentinel_rover.state.policy import decide_channels

_logger = logging.getLogger(__name__)


class Dispatcher:
    """Notify responder channels for one threat or alert at a time.

    Dispatches for different entities may run concurrently; each call to
    :meth:`dispatch` walks its own channel list in policy order.
    """

    def __init__(
        self,
        responders: Mapping[ResponderChannel, Responder],
        *,
        channel_timeout: float | None = None,
    ) -> None:
        self._responders = dict(responders)
        self._channel_timeout = channel_timeout

    async def notify(self, channel: ResponderChannel, entity: Threat | Alert) -> bool:
        """Ask one channel to accept *entity*.

        Never raises: a failing, missing, or timed-out channel is logged
        and reported as ``False``.
        """
        try:
            responder = self._responders.get(channel)
            if responder is None:
                raise ChannelDispatchError(f"No responder configured for {channel}", channel=channel)
            if self._channel_timeout is not None:
                return bool(await asyncio.wait_for(responder.notify(entity), self._channel_timeout))
            return bool(await responder.notify(entity))
        except TimeoutError:
            _logger.warning("Channel %s timed out after %ss for %s", channel, self._channel_timeout, entity.id)
        except Exception:
            _logger.warning("Channel %s failed for %s", channel, entity.id, exc_info=True)
        return False

    async def dispatch(self, entity: Threat | Alert) -> tuple[ResponderChannel, ...]:
        """Notify every channel the policy selects; return the ones that succeeded."""
        succeeded: list[ResponderChannel] = []
        for channel in decide_channels(entity):
            if await self.notify(channel, entity):
                succeeded.append(channel)
        _logger.debug("Dispatch for %s reached %s", entity.id, [str(c) for c in succeeded])
        return tuple(succeeded)
