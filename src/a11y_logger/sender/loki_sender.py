"""Loki sender for accessibility log batches.

This module turns a detached batch into a single Loki push request, or
echoes it locally when Loki is disabled. Delivery is best-effort: a failed
push is logged and counted, never raised and never retried.
"""

from __future__ import annotations

import json
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from ..config import A11yLoggerConfig, get_a11y_logger_config
from ..core.events import LogEntry


def build_push_payload(entries: List[LogEntry], config: A11yLoggerConfig) -> Dict[str, Any]:
    """Build the Loki push body: one stream holding every entry in order.

    Args:
        entries: Batch to encode
        config: Supplies the stream labels

    Returns:
        Dictionary ready to be JSON encoded
    """
    return {
        "streams": [
            {
                "stream": config.stream_labels(),
                "values": [entry.to_loki_value() for entry in entries],
            }
        ]
    }


class LokiSender:
    """Ships log batches to Loki or to the local console."""

    def __init__(self, config_provider: Callable[[], A11yLoggerConfig] = get_a11y_logger_config):
        """Initialize the Loki sender.

        Args:
            config_provider: Returns the current settings; called on every send
        """
        self._config_provider = config_provider
        self._stats_lock = threading.Lock()

        # Statistics
        self._total_batches_sent = 0
        self._total_batches_failed = 0
        self._total_entries_sent = 0
        self._total_entries_echoed = 0
        self._total_send_time = 0.0
        self._last_successful_send: Optional[datetime] = None
        self._last_error: Optional[str] = None

    def send(self, entries: List[LogEntry]) -> bool:
        """Deliver a batch according to the current configuration.

        Args:
            entries: Detached batch, in enqueue order

        Returns:
            True if the batch was pushed or handled locally, False if the push failed
        """
        if not entries:
            return True

        config = self._config_provider()

        if not config.loki_enabled:
            self._echo(entries, config)
            return True

        start_time = time.time()

        try:
            payload = build_push_payload(entries, config)
            success, error_msg = self._send_request(config.push_url, payload, config.request_timeout_seconds)
        except Exception as e:
            success, error_msg = False, f"Unexpected error building push request: {e}"

        send_time = time.time() - start_time

        with self._stats_lock:
            self._total_send_time += send_time
            if success:
                self._total_batches_sent += 1
                self._total_entries_sent += len(entries)
                self._last_successful_send = datetime.now()
                self._last_error = None
            else:
                self._total_batches_failed += 1
                self._last_error = error_msg

        if success:
            logger.info(f"Pushed {len(entries)} a11y log entries to Loki in {send_time:.2f}s")
        else:
            logger.error(f"Failed to send {len(entries)} a11y log entries to Loki: {error_msg}")

        return success

    def get_stats(self) -> Dict[str, Any]:
        """Get sender statistics.

        Returns:
            Dictionary with sender statistics
        """
        with self._stats_lock:
            attempts = self._total_batches_sent + self._total_batches_failed

            return {
                "total_batches_sent": self._total_batches_sent,
                "total_batches_failed": self._total_batches_failed,
                "total_entries_sent": self._total_entries_sent,
                "total_entries_echoed": self._total_entries_echoed,
                "success_rate": self._total_batches_sent / max(1, attempts),
                "average_send_time_seconds": self._total_send_time / max(1, attempts),
                "last_successful_send": self._last_successful_send.isoformat() if self._last_successful_send else None,
                "last_error": self._last_error,
            }

    def _echo(self, entries: List[LogEntry], config: A11yLoggerConfig) -> None:
        """Write each entry to the local log when running in development."""
        if not config.is_development:
            return

        for entry in entries:
            logger.bind(labels=dict(entry.labels)).log(entry.level.loguru_level, f"[A11y {entry.level.value.upper()}] {entry.message}")
            with self._stats_lock:
                self._total_entries_echoed += 1

    def _send_request(self, url: str, payload: Dict[str, Any], timeout: float) -> Tuple[bool, str]:
        """Send a single push request.

        Args:
            url: Loki push endpoint URL
            payload: JSON payload to send
            timeout: Request timeout in seconds

        Returns:
            Tuple of (success, error_message)
        """
        try:
            req = Request(
                url,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            with urlopen(req, timeout=timeout) as response:
                if 200 <= response.status < 300:
                    logger.debug(f"Loki responded with {response.status}")
                    return True, ""
                return False, f"HTTP {response.status}: {response.reason}"

        except HTTPError as e:
            return False, f"HTTP error: {e.code} {e.reason}"

        except URLError as e:
            return False, f"Network error: {e.reason}"

        except Exception as e:
            return False, f"Request error: {e}"
