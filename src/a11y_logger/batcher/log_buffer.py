"""In-memory log buffer with size- and time-based flushing.

This module holds accessibility log entries until either the buffer
reaches ``max_buffer_size`` (threshold flush) or ``flush_interval``
milliseconds pass after the first unflushed entry (timed flush). A flush
detaches the whole queue under the lock before any I/O, so entries added
while a batch is being sent always land in the next batch.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Set

from loguru import logger

from ..config import A11yLoggerConfig, get_a11y_logger_config
from ..core.events import LogEntry

FlushCallback = Callable[[List[LogEntry]], Any]
# Same call shape as threading.Timer(interval, function, args=...)
TimerFactory = Callable[..., Any]


class LogBuffer:
    """Ordered queue of log entries with at most one pending flush timer."""

    def __init__(
        self,
        on_flush: FlushCallback,
        config_provider: Callable[[], A11yLoggerConfig] = get_a11y_logger_config,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """Initialize the log buffer.

        Args:
            on_flush: Receives each detached batch, in enqueue order
            config_provider: Returns the current settings; called at every decision point
            timer_factory: Creates the one-shot flush timer
        """
        self._on_flush = on_flush
        self._config_provider = config_provider
        self._timer_factory = timer_factory

        self._entries: List[LogEntry] = []
        self._timer: Optional[Any] = None
        self._timer_token: Optional[object] = None
        self._inflight: Set[threading.Thread] = set()
        self._lock = threading.RLock()

        # Statistics
        self._total_enqueued = 0
        self._total_flushed = 0
        self._timed_flushes = 0
        self._threshold_flushes = 0
        self._manual_flushes = 0
        self._dispatch_errors = 0

    def add(self, entry: LogEntry) -> None:
        """Append an entry; flush immediately at the size threshold, else arm the timer."""
        with self._lock:
            self._entries.append(entry)
            self._total_enqueued += 1

            config = self._config_provider()
            if len(self._entries) < config.max_buffer_size:
                self._schedule_flush(config)
                return

            self._cancel_timer()
            batch = self._detach()
            self._threshold_flushes += 1

        logger.debug(f"Buffer reached {config.max_buffer_size} entries, flushing {len(batch)} immediately")
        self._dispatch_in_background(batch)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Send everything buffered and wait for in-flight sends to finish.

        Args:
            timeout: Maximum seconds to wait for each in-flight background send
        """
        with self._lock:
            self._cancel_timer()
            batch = self._detach()
            current = threading.current_thread()
            pending = [thread for thread in self._inflight if thread is not current]
            if batch:
                self._manual_flushes += 1

        if batch:
            self._dispatch(batch)

        for thread in pending:
            thread.join(timeout)

    def reset(self) -> None:
        """Drop buffered entries and cancel the timer without sending anything."""
        with self._lock:
            self._cancel_timer()
            dropped = len(self._entries)
            self._entries = []

        if dropped:
            logger.debug(f"Reset log buffer, dropped {dropped} entries")

    def entries(self) -> List[LogEntry]:
        """Snapshot of the currently buffered entries."""
        with self._lock:
            return list(self._entries)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def has_pending_timer(self) -> bool:
        with self._lock:
            return self._timer is not None

    def get_stats(self) -> Dict[str, Any]:
        """Get buffer statistics."""
        with self._lock:
            return {
                "buffered_entries": len(self._entries),
                "timer_pending": self._timer is not None,
                "inflight_sends": len(self._inflight),
                "total_enqueued": self._total_enqueued,
                "total_flushed": self._total_flushed,
                "timed_flushes": self._timed_flushes,
                "threshold_flushes": self._threshold_flushes,
                "manual_flushes": self._manual_flushes,
                "dispatch_errors": self._dispatch_errors,
            }

    def _schedule_flush(self, config: A11yLoggerConfig) -> None:
        """Arm the flush timer unless one is already pending. Caller holds the lock."""
        if self._timer is not None:
            return

        token = object()
        timer = self._timer_factory(config.flush_interval_seconds, self._on_timer, args=(token,))
        timer.daemon = True
        self._timer = timer
        self._timer_token = token
        timer.start()

    def _cancel_timer(self) -> None:
        """Cancel and forget the pending timer. Caller holds the lock."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        self._timer_token = None

    def _detach(self) -> List[LogEntry]:
        """Swap the queue for an empty one and return the old contents. Caller holds the lock."""
        batch = self._entries
        self._entries = []
        self._total_flushed += len(batch)
        return batch

    def _on_timer(self, token: object) -> None:
        with self._lock:
            if token is not self._timer_token:
                return  # cancelled or superseded
            self._timer = None
            self._timer_token = None
            batch = self._detach()
            if not batch:
                return
            self._timed_flushes += 1
            self._inflight.add(threading.current_thread())

        logger.debug(f"Flush interval elapsed, flushing {len(batch)} entries")
        try:
            self._dispatch(batch)
        finally:
            with self._lock:
                self._inflight.discard(threading.current_thread())

    def _dispatch_in_background(self, batch: List[LogEntry]) -> None:
        """Send a detached batch on a daemon thread without waiting for it."""
        thread = threading.Thread(target=self._run_background_dispatch, args=(batch,), name="a11y-log-flush", daemon=True)
        with self._lock:
            self._inflight.add(thread)
            thread.start()

    def _run_background_dispatch(self, batch: List[LogEntry]) -> None:
        try:
            self._dispatch(batch)
        finally:
            with self._lock:
                self._inflight.discard(threading.current_thread())

    def _dispatch(self, batch: List[LogEntry]) -> None:
        try:
            self._on_flush(batch)
        except Exception as e:
            with self._lock:
                self._dispatch_errors += 1
            logger.error(f"Error flushing {len(batch)} a11y log entries: {e}")
