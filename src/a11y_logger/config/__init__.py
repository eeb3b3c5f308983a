"""Configuration module for the accessibility logger."""

from .logger_config import setup_logging
from .settings import A11yLoggerConfig, ConfigManager, configure_a11y_logger, get_a11y_logger_config, get_config_manager, reset_a11y_logger_config

__all__ = [
    "A11yLoggerConfig",
    "ConfigManager",
    "configure_a11y_logger",
    "get_a11y_logger_config",
    "get_config_manager",
    "reset_a11y_logger_config",
    "setup_logging",
]
