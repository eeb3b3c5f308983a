"""Log entry models for the accessibility logger.

Entries flow through the pipeline: Recorder → LogBuffer → LokiSender → Loki
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

LabelValue = Union[str, int, float]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NANOS_PER_MILLI = 1_000_000


class LogLevel(str, Enum):
    """Severity attached to every accessibility log entry."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def loguru_level(self) -> str:
        return {"info": "INFO", "warn": "WARNING", "error": "ERROR"}[self.value]


class EventKind(str, Enum):
    """Kinds of accessibility events, carried as the ``type`` label."""

    CONTRAST = "contrast"
    WCAG = "wcag"
    EVALUATION = "evaluation"
    SESSION = "session"
    ERROR = "error"
    SUMMARY = "summary"
    ARIA = "aria"


def utc_now() -> datetime:
    """Current UTC time truncated to whole milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


@dataclass(frozen=True)
class LogEntry:
    """One accessibility event queued for shipment."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=utc_now)
    session_id: Optional[str] = None
    labels: Mapping[str, LabelValue] = field(default_factory=dict)

    def __post_init__(self):
        """Freeze the label mapping and pin naive timestamps to UTC."""
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    def epoch_millis(self) -> int:
        """Milliseconds since the Unix epoch, computed without float rounding."""
        return (self.timestamp - EPOCH) // timedelta(milliseconds=1)

    def epoch_nanos(self) -> str:
        """Loki timestamp: epoch milliseconds scaled to nanoseconds, as a decimal string."""
        return str(self.epoch_millis() * NANOS_PER_MILLI)

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to a dictionary for inspection or local serialization."""
        data: Dict[str, Any] = {
            "level": self.level.value,
            "message": self.message,
            "timestamp": self.timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "labels": dict(self.labels),
        }
        if self.session_id is not None:
            data["sessionId"] = self.session_id
        return data

    def to_loki_value(self) -> List[str]:
        """Encode as a Loki ``[timestamp, line]`` pair.

        The line is a JSON object with ``level`` and ``msg`` followed by every label.
        """
        line = {"level": self.level.value, "msg": self.message, **self.labels}
        return [self.epoch_nanos(), json.dumps(line, ensure_ascii=False, separators=(",", ":"))]
