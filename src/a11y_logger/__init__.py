"""A11y Logger - Buffered accessibility audit logging shipped to Grafana Loki."""

from .config import A11yLoggerConfig, configure_a11y_logger, get_a11y_logger_config, reset_a11y_logger_config, setup_logging
from .core import A11yLogger, AriaLabels, ContrastLabels, ErrorLabels, EvaluationLabels, LogEntry, LogLevel, SessionLabels, SummaryData, WcagLabels, a11y_logger

__version__ = "1.0.0"

__all__ = [
    "a11y_logger",
    "A11yLogger",
    "A11yLoggerConfig",
    "configure_a11y_logger",
    "get_a11y_logger_config",
    "reset_a11y_logger_config",
    "setup_logging",
    "LogEntry",
    "LogLevel",
    "ContrastLabels",
    "WcagLabels",
    "EvaluationLabels",
    "SessionLabels",
    "ErrorLabels",
    "SummaryData",
    "AriaLabels",
]
