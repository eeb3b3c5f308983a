"""Shared fixtures for the accessibility logger tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from loguru import logger

from a11y_logger.config import ConfigManager
from a11y_logger.config.settings import ENV_OVERRIDES
from a11y_logger.core import A11yLogger, ShutdownHook
from a11y_logger.sender import loki_sender

FIXED_TIME = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval: float, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.fired = True
            self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    """Records every timer the buffer creates."""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, interval: float, function, args=None, kwargs=None) -> FakeTimer:
        timer = FakeTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_latest(self) -> None:
        self.timers[-1].fire()


class FakeResponse:
    def __init__(self, status: int = 204, reason: str = "No Content"):
        self.status = status
        self.reason = reason

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeUrlopen:
    """Captures push requests instead of touching the network."""

    def __init__(self):
        self.requests: List[Any] = []
        self.timeouts: List[Optional[float]] = []
        self.failures: List[Exception] = []
        self.status = 204

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        self.timeouts.append(timeout)
        if self.failures:
            raise self.failures.pop(0)
        return FakeResponse(self.status)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def body(self, index: int = 0) -> Dict[str, Any]:
        return json.loads(self.requests[index].data.decode("utf-8"))

    def values(self, index: int = 0) -> List[List[str]]:
        return self.body(index)["streams"][0]["values"]

    def lines(self, index: int = 0) -> List[Dict[str, Any]]:
        return [json.loads(line) for _, line in self.values(index)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep A11Y_* variables from the host environment out of the tests."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_urlopen(monkeypatch) -> FakeUrlopen:
    fake = FakeUrlopen()
    monkeypatch.setattr(loki_sender, "urlopen", fake)
    return fake


@pytest.fixture
def timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def config_manager() -> ConfigManager:
    manager = ConfigManager()
    manager.configure(register_shutdown_hook=False)
    return manager


@pytest.fixture
def a11y(config_manager, timers, fake_urlopen) -> A11yLogger:
    """Logger wired to fake timers, a fake transport and a fixed clock."""
    instance = A11yLogger(
        config_manager=config_manager,
        shutdown_hook=ShutdownHook(register=None, unregister=None),
        timer_factory=timers,
        clock=lambda: FIXED_TIME,
    )
    yield instance
    instance.reset()


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records: List[Dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)


def echo_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Only the local echo lines (they carry a ``labels`` extra)."""
    return [r for r in records if "labels" in r["extra"]]
