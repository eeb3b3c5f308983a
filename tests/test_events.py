"""Tests for log entry encoding."""

import json
from datetime import datetime, timezone

from a11y_logger import a11y_logger
from a11y_logger.core import LogEntry, LogLevel
from a11y_logger.core.events import utc_now


def test_epoch_nanos_is_milliseconds_times_a_million():
    entry = LogEntry(level=LogLevel.INFO, message="m", timestamp=datetime(2025, 6, 15, 12, 0, 0, 123000, tzinfo=timezone.utc))

    assert entry.epoch_millis() == 1749988800123
    assert entry.epoch_nanos() == "1749988800123000000"


def test_naive_timestamps_are_treated_as_utc():
    entry = LogEntry(level=LogLevel.INFO, message="m", timestamp=datetime(1970, 1, 1, 0, 0, 1))

    assert entry.epoch_nanos() == "1000000000"


def test_utc_now_has_millisecond_precision():
    now = utc_now()

    assert now.tzinfo is timezone.utc
    assert now.microsecond % 1000 == 0


def test_to_dict_round_trips_timestamp():
    ts = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    data = LogEntry(level=LogLevel.WARN, message="m", timestamp=ts, session_id="s", labels={"type": "aria"}).to_dict()

    assert data["timestamp"] == "2025-01-02T03:04:05.678Z"
    assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")) == ts
    assert data["sessionId"] == "s"
    assert data["labels"] == {"type": "aria"}


def test_to_dict_omits_missing_session_id():
    assert "sessionId" not in LogEntry(level=LogLevel.INFO, message="m").to_dict()


def test_loki_line_keeps_unicode_and_compact_json():
    entry = LogEntry(level=LogLevel.ERROR, message="Контраст 🎨", labels={"type": "error", "stack": ""})
    _, line = entry.to_loki_value()

    assert line == '{"level":"error","msg":"Контраст 🎨","type":"error","stack":""}'
    assert json.loads(line)["msg"] == "Контраст 🎨"


def test_global_logger_reset():
    try:
        a11y_logger.contrast("global")
        assert [e.message for e in a11y_logger.pending_entries()] == ["global"]
        assert a11y_logger.has_flush_timer()
    finally:
        a11y_logger.reset()

    assert a11y_logger.pending_entries() == []
    assert not a11y_logger.has_flush_timer()
    assert not a11y_logger.shutdown_hook.installed
