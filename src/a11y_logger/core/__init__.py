"""Core accessibility logger components."""

from .events import EventKind, LabelValue, LogEntry, LogLevel
from .labels import LABEL_DEFAULTS, AriaLabels, ContrastLabels, ElementInfo, ErrorLabels, EvaluationLabels, EventLabels, SessionLabels, SummaryData, WcagLabels
from .recorder import A11yLogger, a11y_logger
from .shutdown_hook import ShutdownHook

__all__ = [
    # Entries
    "LogEntry",
    "LogLevel",
    "EventKind",
    "LabelValue",
    # Label models
    "EventLabels",
    "ContrastLabels",
    "WcagLabels",
    "EvaluationLabels",
    "SessionLabels",
    "ErrorLabels",
    "SummaryData",
    "AriaLabels",
    "ElementInfo",
    "LABEL_DEFAULTS",
    # Logger
    "A11yLogger",
    "a11y_logger",
    "ShutdownHook",
]
