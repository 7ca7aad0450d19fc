from __future__ import annotations

import asyncio

import pytest

from sentinel_rover.dispatch import Dispatcher, SimulatedResponder, default_responders
from sentinel_rover.exceptions import ChannelDispatchError
from sentinel_rover.models import Alert, Location, ResponderChannel, Severity, Threat


class _RecordingResponder:
    def __init__(self, channel: ResponderChannel, calls: list[ResponderChannel], result: bool = True) -> None:
        self.channel = channel
        self._calls = calls
        self._result = result

    async def notify(self, entity: Threat | Alert) -> bool:
        self._calls.append(self.channel)
        return self._result


class _FailingResponder:
    def __init__(self, channel: ResponderChannel) -> None:
        self.channel = channel

    async def notify(self, entity: Threat | Alert) -> bool:
        raise ChannelDispatchError("switchboard offline", channel=self.channel)


class _HangingResponder:
    def __init__(self, channel: ResponderChannel) -> None:
        self.channel = channel

    async def notify(self, entity: Threat | Alert) -> bool:
        await asyncio.sleep(10)
        return True


def _critical() -> Threat:
    return Threat(severity=Severity.CRITICAL, latitude=10.0, longitude=20.0, distance=50.0)


@pytest.mark.asyncio
async def test_dispatch_critical_reaches_all_channels() -> None:
    dispatcher = Dispatcher(default_responders(latency=0.0))

    assert await dispatcher.dispatch(_critical()) == ("Police", "Fire", "Medical")


@pytest.mark.asyncio
async def test_dispatch_notifies_in_policy_order() -> None:
    calls: list[ResponderChannel] = []
    dispatcher = Dispatcher({channel: _RecordingResponder(channel, calls) for channel in ResponderChannel})

    await dispatcher.dispatch(_critical())

    assert calls == [ResponderChannel.POLICE, ResponderChannel.FIRE, ResponderChannel.MEDICAL]


@pytest.mark.asyncio
async def test_failing_channel_is_omitted_and_dispatch_continues() -> None:
    calls: list[ResponderChannel] = []
    responders = {channel: _RecordingResponder(channel, calls) for channel in ResponderChannel}
    responders[ResponderChannel.FIRE] = _FailingResponder(ResponderChannel.FIRE)
    dispatcher = Dispatcher(responders)

    result = await dispatcher.dispatch(_critical())

    assert result == (ResponderChannel.POLICE, ResponderChannel.MEDICAL)
    assert calls == [ResponderChannel.POLICE, ResponderChannel.MEDICAL]


@pytest.mark.asyncio
async def test_channel_reporting_false_is_omitted() -> None:
    calls: list[ResponderChannel] = []
    responders = {channel: _RecordingResponder(channel, calls) for channel in ResponderChannel}
    responders[ResponderChannel.POLICE] = _RecordingResponder(ResponderChannel.POLICE, calls, result=False)

    result = await Dispatcher(responders).dispatch(_critical())

    assert result == (ResponderChannel.FIRE, ResponderChannel.MEDICAL)


@pytest.mark.asyncio
async def test_missing_responder_counts_as_failure() -> None:
    dispatcher = Dispatcher({ResponderChannel.POLICE: SimulatedResponder(ResponderChannel.POLICE, latency=0.0)})

    assert await dispatcher.notify(ResponderChannel.MEDICAL, _critical()) is False
    assert await dispatcher.dispatch(_critical()) == (ResponderChannel.POLICE,)


@pytest.mark.asyncio
async def test_channel_timeout_records_failure() -> None:
    responders = dict(default_responders(latency=0.0))
    responders[ResponderChannel.MEDICAL] = _HangingResponder(ResponderChannel.MEDICAL)
    dispatcher = Dispatcher(responders, channel_timeout=0.05)

    assert await dispatcher.dispatch(_critical()) == (ResponderChannel.POLICE, ResponderChannel.FIRE)


@pytest.mark.asyncio
async def test_manual_alert_dispatch() -> None:
    alert = Alert(location=Location(latitude=13.0, longitude=80.0))

    result = await Dispatcher(default_responders(latency=0.0)).dispatch(alert)

    assert result == (ResponderChannel.POLICE, ResponderChannel.MEDICAL)


@pytest.mark.asyncio
async def test_concurrent_dispatches_are_independent() -> None:
    dispatcher = Dispatcher(default_responders(latency=0.01))
    high = Threat(severity=Severity.HIGH, latitude=1.0, longitude=1.0, distance=1.0)

    results = await asyncio.gather(dispatcher.dispatch(_critical()), dispatcher.dispatch(high))

    assert results == [
        (ResponderChannel.POLICE, ResponderChannel.FIRE, ResponderChannel.MEDICAL),
        (ResponderChannel.POLICE, ResponderChannel.MEDICAL),
    ]
