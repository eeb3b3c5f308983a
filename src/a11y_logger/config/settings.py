"""Configuration management for the accessibility logger.

Settings are resolved on every call rather than cached: static defaults
first, then environment variable overrides, then values merged in through
``configure_a11y_logger``. The buffer and sender re-read them at each
decision point, so a host application can reconfigure at runtime.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger
from pydantic.alias_generators import to_snake

PUSH_PATH = "/loki/api/v1/push"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class A11yLoggerConfig:
    """Resolved accessibility logger settings."""

    # Loki endpoint
    loki_url: str = "http://localhost:3100"
    loki_enabled: bool = False
    request_timeout_seconds: float = 10.0

    # Local echo when Loki is disabled
    is_development: bool = False

    # Batching
    flush_interval: int = 1000  # milliseconds
    max_buffer_size: int = 100

    # Stream identity
    job_label: str = "accessibility"
    container_label: str = "stonewall-sveltekit"
    environment: str = "development"
    service_label: str = "a11y-monitoring"

    # Lifecycle
    register_shutdown_hook: bool = True

    @property
    def push_url(self) -> str:
        """Full Loki push endpoint URL."""
        return f"{self.loki_url.rstrip('/')}{PUSH_PATH}"

    @property
    def flush_interval_seconds(self) -> float:
        return self.flush_interval / 1000.0

    def stream_labels(self) -> Dict[str, str]:
        """Labels identifying the single Loki stream every batch is pushed to."""
        return {
            "job": self.job_label,
            "container": self.container_label,
            "environment": self.environment,
            "service": self.service_label,
        }

    def validate(self) -> Tuple[bool, List[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.loki_url:
            errors.append("Loki URL is required")

        if self.flush_interval <= 0:
            errors.append("Flush interval must be positive")

        if self.max_buffer_size <= 0:
            errors.append("Max buffer size must be positive")

        if self.request_timeout_seconds <= 0:
            errors.append("Request timeout must be positive")

        return len(errors) == 0, errors


FIELD_NAMES = frozenset(f.name for f in fields(A11yLoggerConfig))

# Environment variable -> (field name, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "A11Y_LOKI_URL": ("loki_url", str),
    "A11Y_LOKI_ENABLED": ("loki_enabled", _parse_bool),
    "A11Y_IS_DEVELOPMENT": ("is_development", _parse_bool),
    "A11Y_FLUSH_INTERVAL": ("flush_interval", int),
    "A11Y_MAX_BUFFER_SIZE": ("max_buffer_size", int),
    "A11Y_JOB_LABEL": ("job_label", str),
    "A11Y_CONTAINER_LABEL": ("container_label", str),
    "A11Y_ENVIRONMENT": ("environment", str),
    "A11Y_SERVICE_LABEL": ("service_label", str),
    "A11Y_REGISTER_SHUTDOWN_HOOK": ("register_shutdown_hook", _parse_bool),
    "A11Y_REQUEST_TIMEOUT": ("request_timeout_seconds", float),
}


def load_env_overrides() -> Dict[str, Any]:
    """Collect configuration overrides from environment variables."""
    overrides: Dict[str, Any] = {}

    for env_name, (field_name, parse) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            overrides[field_name] = parse(raw)
        except ValueError:
            logger.warning(f"Invalid value for {env_name}: {raw!r}")

    return overrides


def normalize_key(key: str) -> str:
    """Map ``lokiUrl``-style keys onto dataclass field names."""
    return key if key in FIELD_NAMES else to_snake(key)


class ConfigManager:
    """Holds explicit overrides and resolves the effective configuration."""

    def __init__(self):
        self._overrides: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def configure(self, overrides: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        """Merge overrides into the current configuration.

        Later calls win; keys not mentioned keep their previous value.

        Args:
            overrides: Mapping of settings, snake_case or camelCase keys
            **kwargs: Settings given as keyword arguments
        """
        merged = dict(overrides or {})
        merged.update(kwargs)

        accepted: Dict[str, Any] = {}
        for key, value in merged.items():
            name = normalize_key(key)
            if name not in FIELD_NAMES:
                logger.warning(f"Ignoring unknown a11y logger setting: {key}")
                continue
            accepted[name] = value

        with self._lock:
            self._overrides.update(accepted)

        is_valid, errors = self.get_config().validate()
        if not is_valid:
            for error in errors:
                logger.warning(f"A11y logger configuration problem: {error}")

    def get_config(self) -> A11yLoggerConfig:
        """Resolve defaults, environment overrides and explicit overrides."""
        with self._lock:
            explicit = dict(self._overrides)

        return A11yLoggerConfig(**{**load_env_overrides(), **explicit})

    def get_overrides(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._overrides)

    def reset(self) -> None:
        """Drop every explicit override. Environment overrides still apply."""
        with self._lock:
            self._overrides.clear()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def configure_a11y_logger(overrides: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
    """Merge settings into the global accessibility logger configuration."""
    _config_manager.configure(overrides, **kwargs)


def get_a11y_logger_config() -> A11yLoggerConfig:
    """Get the fully resolved global configuration."""
    return _config_manager.get_config()


def reset_a11y_logger_config() -> None:
    """Drop explicit overrides from the global configuration.

    Settings fall back to the defaults, or to ``A11Y_*`` environment values where those are set.
    """
    _config_manager.reset()
