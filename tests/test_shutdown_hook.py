"""Tests for the flush-on-exit hook."""

from a11y_logger.core import A11yLogger, ShutdownHook
from a11y_logger.config import ConfigManager
from conftest import FakeTimerFactory


class FakeExitRegistry:
    """Stand-in for atexit."""

    def __init__(self):
        self.callbacks = []

    def register(self, fn):
        self.callbacks.append(fn)
        return fn

    def unregister(self, fn):
        self.callbacks = [cb for cb in self.callbacks if cb != fn]

    def run(self):
        for fn in list(self.callbacks):
            fn()


def make_logger(registry, **settings):
    manager = ConfigManager()
    manager.configure(**settings)
    hook = ShutdownHook(register=registry.register, unregister=registry.unregister)
    return A11yLogger(config_manager=manager, shutdown_hook=hook, timer_factory=FakeTimerFactory())


def test_hook_installed_once_on_first_event():
    registry = FakeExitRegistry()
    a11y = make_logger(registry)

    assert registry.callbacks == []
    a11y.contrast("C1")
    a11y.wcag("W1")
    a11y.error("E1")

    assert len(registry.callbacks) == 1
    assert a11y.shutdown_hook.installed


def test_hook_not_installed_when_disabled():
    registry = FakeExitRegistry()
    a11y = make_logger(registry, register_shutdown_hook=False)
    a11y.contrast("C1")

    assert registry.callbacks == []
    assert not a11y.shutdown_hook.installed


def test_missing_exit_facility_is_skipped_silently():
    a11y = A11yLogger(config_manager=ConfigManager(), shutdown_hook=ShutdownHook(register=None, unregister=None), timer_factory=FakeTimerFactory())
    a11y.contrast("C1")

    assert not a11y.shutdown_hook.installed
    assert len(a11y.pending_entries()) == 1


def test_exit_flushes_pending_entries():
    registry = FakeExitRegistry()
    a11y = make_logger(registry)
    a11y.contrast("C1")
    a11y.aria("A1")

    registry.run()

    assert a11y.pending_entries() == []
    assert not a11y.has_flush_timer()


def test_reset_forgets_and_unregisters_hook():
    registry = FakeExitRegistry()
    a11y = make_logger(registry)
    a11y.contrast("C1")
    a11y.reset()

    assert registry.callbacks == []
    assert not a11y.shutdown_hook.installed

    a11y.contrast("C2")
    assert len(registry.callbacks) == 1


def test_failing_cleanup_is_logged_not_raised():
    registry = FakeExitRegistry()
    hook = ShutdownHook(register=registry.register, unregister=registry.unregister)

    def explode():
        raise RuntimeError("boom")

    assert hook.ensure_installed(explode)
    registry.run()


def test_stats_report_hook_state():
    registry = FakeExitRegistry()
    a11y = make_logger(registry)
    assert a11y.get_stats()["shutdown_hook_installed"] is False

    a11y.session("S1")
    stats = a11y.get_stats()
    assert stats["shutdown_hook_installed"] is True
    assert stats["buffer"]["buffered_entries"] == 1
    assert stats["sender"]["total_batches_sent"] == 0
