"""Tests for the job event log."""

from datetime import UTC, datetime, timedelta

from autorank.jobs.event_log import EventLog
from autorank.jobs.models import LogLevel


def test_append_assigns_sequence_and_ids() -> None:
    log = EventLog()
    first = log.append(LogLevel.INFO, "Navigating", "LOGIN")
    second = log.append(LogLevel.SUCCESS, "Logged in", "AUTH", has_evidence=True)

    assert [e.seq for e in log] == [1, 2]
    assert first.id != second.id
    assert second.has_evidence is True
    assert log.events == (first, second)
    assert len(log) == 2


def test_timestamps_never_go_backwards() -> None:
    now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    ticks = iter([now, now - timedelta(seconds=5), now, now + timedelta(seconds=1)])
    log = EventLog(clock=lambda: next(ticks))

    for i in range(4):
        log.append(LogLevel.INFO, f"event {i}", "INIT")

    timestamps = [e.timestamp for e in log]
    assert timestamps == sorted(timestamps)
    assert timestamps[1] == now
    # Ties keep append order through seq
    assert [e.message for e in log] == ["event 0", "event 1", "event 2", "event 3"]


def test_since_and_get() -> None:
    log = EventLog()
    events = [log.append(LogLevel.INFO, f"event {i}", "NAV") for i in range(5)]

    assert log.since(0) == events
    assert log.since(3) == events[3:]
    assert log.since(10) == []
    assert log.get(events[2].id) == events[2]
    assert log.get("missing") is None


def test_clear_keeps_sequence_counting() -> None:
    log = EventLog()
    log.append(LogLevel.INFO, "event", "NAV")
    log.append(LogLevel.INFO, "event", "NAV")
    log.clear()

    assert len(log) == 0
    again = log.append(LogLevel.INFO, "again", "NAV")
    assert again.seq == 3
    # A cursor taken before the clear still yields the new events
    assert log.since(2) == [again]


def test_events_snapshot_is_not_live() -> None:
    log = EventLog()
    log.append(LogLevel.INFO, "event", "NAV")
    snapshot = log.events
    log.append(LogLevel.INFO, "later", "NAV")

    assert len(snapshot) == 1
