"""Accessibility event recorder.

``A11yLogger`` is the public surface: one recording method per event kind
plus ``flush``. Recording never blocks on I/O; it shapes the event into a
``LogEntry``, makes sure the flush-on-exit hook is installed, and hands the
entry to the buffer.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

from ..batcher import LogBuffer, TimerFactory
from ..config import A11yLoggerConfig, ConfigManager, get_config_manager
from ..sender import LokiSender
from .events import LogEntry, utc_now
from .labels import AriaLabels, ContrastLabels, ErrorLabels, EvaluationLabels, EventLabels, SessionLabels, SummaryData, WcagLabels
from .shutdown_hook import ShutdownHook

LabelsT = TypeVar("LabelsT", bound=EventLabels)
LabelsArg = Union[EventLabels, Mapping[str, Any], None]


def _coerce_labels(model: Type[LabelsT], labels: LabelsArg, fields: Dict[str, Any]) -> LabelsT:
    """Validate caller labels, given as a model, a mapping and/or keyword arguments."""
    if isinstance(labels, model) and not fields:
        return labels

    data: Dict[str, Any] = {}
    if isinstance(labels, EventLabels):
        data.update(labels.model_dump(exclude_unset=True))
    elif labels:
        data.update(labels)
    data.update(fields)
    return model.model_validate(data)


class A11yLogger:
    """Buffered accessibility event logger shipping batches to Loki."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        sender: Optional[LokiSender] = None,
        shutdown_hook: Optional[ShutdownHook] = None,
        timer_factory: TimerFactory = threading.Timer,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the logger.

        Args:
            config_manager: Settings source; defaults to the global manager
            sender: Transport for flushed batches
            shutdown_hook: Exit hook installer; defaults to one backed by atexit
            timer_factory: Creates the one-shot flush timer
            clock: Returns the timestamp for new entries
        """
        self.config_manager = config_manager or get_config_manager()
        self.sender = sender or LokiSender(self.config_manager.get_config)
        self.shutdown_hook = shutdown_hook or ShutdownHook()
        self.buffer = LogBuffer(self.sender.send, self.config_manager.get_config, timer_factory)
        self._clock = clock

    @property
    def config(self) -> A11yLoggerConfig:
        return self.config_manager.get_config()

    def contrast(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        """Record a contrast ratio violation. Ratios below 3 are errors."""
        self._record(message, _coerce_labels(ContrastLabels, labels, fields))

    def wcag(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        """Record a WCAG rule failure. Only ``severity="error"`` is an error."""
        self._record(message, _coerce_labels(WcagLabels, labels, fields))

    def evaluation(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        self._record(message, _coerce_labels(EvaluationLabels, labels, fields))

    def session(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        self._record(message, _coerce_labels(SessionLabels, labels, fields))

    def error(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        self._record(message, _coerce_labels(ErrorLabels, labels, fields))

    def summary(self, data: LabelsArg = None, **fields: Any) -> None:
        """Record an evaluation summary; the message is built from the issue counts."""
        summary = _coerce_labels(SummaryData, data, fields)
        self._record(summary.message(), summary)

    def aria(self, message: str, labels: LabelsArg = None, **fields: Any) -> None:
        self._record(message, _coerce_labels(AriaLabels, labels, fields))

    def flush(self, timeout: Optional[float] = None) -> None:
        """Send everything buffered and wait for sends already in flight.

        Never raises on transport failure.
        """
        self.buffer.flush(timeout)

    def pending_entries(self) -> List[LogEntry]:
        """Copy of the entries waiting for the next flush."""
        return self.buffer.entries()

    def has_flush_timer(self) -> bool:
        return self.buffer.has_pending_timer()

    def reset(self) -> None:
        """Return to the initial state: empty buffer, no timer, no exit hook."""
        self.buffer.reset()
        self.shutdown_hook.reset()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "buffer": self.buffer.get_stats(),
            "sender": self.sender.get_stats(),
            "shutdown_hook_installed": self.shutdown_hook.installed,
        }

    def _record(self, message: str, labels: EventLabels) -> None:
        entry = LogEntry(
            level=labels.log_level(),
            message=message,
            timestamp=self._clock(),
            session_id=labels.session_id,
            labels=labels.to_labels(),
        )
        self._ensure_shutdown_hook()
        self.buffer.add(entry)

    def _ensure_shutdown_hook(self) -> None:
        if self.shutdown_hook.installed:
            return
        self.shutdown_hook.ensure_installed(self.flush, self.config.register_shutdown_hook)


# Process-wide logger using the global configuration
a11y_logger = A11yLogger()
