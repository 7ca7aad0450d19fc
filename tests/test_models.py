"""Tests for the Pydantic record and request models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from sentinel_rover.models import (
    AlertRequest,
    RoverStatus,
    Severity,
    StatusUpdate,
    Threat,
    ThreatReport,
    ThreatSummary,
    parse_utc_timestamp,
)
from sentinel_rover.state.events import BroadcastEvent, EventName

# ------------------------------------------------------------------
# Status
# ------------------------------------------------------------------


class TestStatusUpdate:
    def test_only_supplied_fields_in_patch(self) -> None:
        update = StatusUpdate.model_validate({"battery": 10, "temperature": 30.5})

        assert update.to_patch() == {"battery": 10.0, "temperature": 30.5}

    def test_explicit_none_is_dropped(self) -> None:
        assert StatusUpdate.model_validate({"battery": None}).to_patch() == {}

    def test_bounds_enforced(self) -> None:
        with pytest.raises(ValidationError):
            StatusUpdate.model_validate({"cpu_usage": 101})

    def test_merged_returns_same_instance_for_empty_patch(self) -> None:
        status = RoverStatus()
        assert status.merged({}) is status


def test_rover_status_is_frozen() -> None:
    status = RoverStatus()
    with pytest.raises(ValidationError):
        status.battery = 1.0  # type: ignore[misc]


# ------------------------------------------------------------------
# Threats
# ------------------------------------------------------------------


class TestThreat:
    def test_defaults(self) -> None:
        threat = Threat(latitude=1.0, longitude=2.0, distance=3.0)

        assert threat.id
        assert threat.severity == Severity.MEDIUM
        assert threat.neutralized is False
        assert threat.neutralized_at is None
        assert threat.alerts_sent == ()
        assert threat.timestamp.tzinfo is not None

    def test_unknown_severity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ThreatReport.model_validate({"severity": "apocalyptic"})

    def test_negative_distance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ThreatReport.model_validate({"distance": -1})

    def test_payload_is_json_ready(self) -> None:
        threat = Threat(latitude=1.0, longitude=2.0, distance=3.0, alerts_sent=("Police",))

        payload = threat.to_payload()

        assert payload["alerts_sent"] == ["Police"]
        assert isinstance(payload["timestamp"], str)

    def test_summary_counts_active(self) -> None:
        active = Threat(latitude=1.0, longitude=2.0, distance=3.0)
        done = Threat(latitude=1.0, longitude=2.0, distance=3.0, neutralized=True)

        summary = ThreatSummary.from_threats((active, done))

        assert (summary.total, summary.active) == (2, 1)


# ------------------------------------------------------------------
# Timestamps and events
# ------------------------------------------------------------------


class TestTimestamps:
    def test_naive_datetime_assumed_utc(self) -> None:
        assert parse_utc_timestamp(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=UTC)

    def test_offset_datetime_converted(self) -> None:
        value = datetime(2026, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
        assert parse_utc_timestamp(value) == datetime(2026, 1, 1, tzinfo=UTC)

    def test_iso_string_with_z(self) -> None:
        assert parse_utc_timestamp("2026-01-01T00:00:00Z") == datetime(2026, 1, 1, tzinfo=UTC)

    def test_epoch_seconds(self) -> None:
        assert parse_utc_timestamp(0) == datetime(1970, 1, 1, tzinfo=UTC)


def test_alert_request_defaults() -> None:
    request = AlertRequest()

    assert request.type == "emergency"
    assert request.message == "Hostile drone detected"
    assert request.location is None


def test_broadcast_event_dumps_models() -> None:
    threat = Threat(latitude=1.0, longitude=2.0, distance=3.0)

    event = BroadcastEvent(name=EventName.RECENT_THREATS, data=[threat])

    assert event.to_message() == {"event": "recent_threats", "data": [threat.to_payload()]}


@pytest.mark.parametrize(
    ("model", "payload"),
    [
        (StatusUpdate, {"latitude": float("nan")}),
        (ThreatReport, {"distance": float("inf")}),
        (AlertRequest, {"location": {"latitude": float("nan"), "longitude": 1.0}}),
    ],
)
def test_non_finite_floats_are_rejected(model: type, payload: dict) -> None:
    with pytest.raises(ValidationError):
        model.model_validate(payload)
