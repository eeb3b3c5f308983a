"""Pydantic models for accessibility event labels.

Each event kind has an input model describing what a caller may pass.
Models accept snake_case or the camelCase wire names (``requiredRatio``,
``elementInfo``...). ``LABEL_DEFAULTS`` is the single table of fallback
values; a missing, ``None``, empty or zero field takes its default.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .events import EventKind, LabelValue, LogLevel

# Contrast ratios strictly below this are logged as errors. Independent of requiredRatio.
CONTRAST_ERROR_THRESHOLD = 3

LABEL_DEFAULTS: Dict[EventKind, Dict[str, LabelValue]] = {
    EventKind.CONTRAST: {
        "selector": "unknown",
        "ratio": 0,
        "requiredRatio": 4.5,
        "foreground": "unknown",
        "background": "unknown",
        "wcagLevel": "AA",
        "tagName": "unknown",
        "page": "",
        "theme": "",
    },
    EventKind.WCAG: {
        "selector": "unknown",
        "rule": "unknown",
        "wcagLevel": "AA",
        "severity": "warning",
    },
    EventKind.EVALUATION: {
        "resultsCount": 0,
        "issuesCount": 0,
        "criticalCount": 0,
        "evaluationTimeMs": 0,
    },
    EventKind.SESSION: {
        "action": "unknown",
        "userId": "anonymous",
        "userAgent": "unknown",
    },
    EventKind.ERROR: {
        "error": "unknown",
        "stack": "",
    },
    EventKind.ARIA: {
        "selector": "unknown",
        "issue": "unknown",
        "tagName": "unknown",
        "fix": "",
        "page": "",
    },
}


def apply_defaults(kind: EventKind, values: Dict[str, Any]) -> Dict[str, LabelValue]:
    """Build the complete label set for an event kind.

    Args:
        kind: Event kind, written as the ``type`` label
        values: Caller-supplied label values keyed by wire name

    Returns:
        Labels with ``type`` plus every field of the kind's defaults table
    """
    labels: Dict[str, LabelValue] = {"type": kind.value}
    for key, default in LABEL_DEFAULTS[kind].items():
        value = values.get(key)
        labels[key] = value if value else default
    return labels


class _LabelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)


class ElementInfo(_LabelModel):
    """Details of the DOM element an issue was found on."""

    tag_name: Optional[str] = Field(None, description="Element tag name")
    text: Optional[str] = Field(None, description="Visible text content")
    html: Optional[str] = Field(None, description="Outer HTML snippet")


class EventLabels(_LabelModel):
    """Fields shared by every event kind."""

    kind: ClassVar[EventKind]
    fixed_level: ClassVar[LogLevel] = LogLevel.INFO

    session_id: Optional[str] = Field(None, description="Correlation identifier, passed through verbatim")

    def log_level(self) -> LogLevel:
        """Level for the entry; kinds with a rule override this, the rest use ``fixed_level``."""
        return self.fixed_level

    def label_values(self) -> Dict[str, Any]:
        """Caller-supplied label fields keyed by wire name."""
        return self.model_dump(by_alias=True, exclude={"session_id"})

    def to_labels(self) -> Dict[str, LabelValue]:
        return apply_defaults(self.kind, self.label_values())


class ContrastLabels(EventLabels):
    """Labels for contrast ratio violations."""

    kind: ClassVar[EventKind] = EventKind.CONTRAST

    selector: Optional[str] = None
    ratio: Optional[Union[int, float]] = Field(None, description="Measured contrast ratio")
    required_ratio: Optional[Union[int, float]] = Field(None, description="Ratio required by the WCAG level")
    foreground: Optional[str] = None
    background: Optional[str] = None
    wcag_level: Optional[str] = None
    element_info: Optional[ElementInfo] = None
    page: Optional[str] = None
    theme: Optional[str] = None

    def log_level(self) -> LogLevel:
        if self.ratio is not None and self.ratio < CONTRAST_ERROR_THRESHOLD:
            return LogLevel.ERROR
        return LogLevel.WARN

    def label_values(self) -> Dict[str, Any]:
        values = self.model_dump(by_alias=True, exclude={"session_id", "element_info"})
        values["tagName"] = self.element_info.tag_name if self.element_info else None
        return values


class WcagLabels(EventLabels):
    """Labels for WCAG rule failures."""

    kind: ClassVar[EventKind] = EventKind.WCAG

    selector: Optional[str] = None
    rule: Optional[str] = None
    wcag_level: Optional[str] = None
    severity: Optional[str] = None

    def log_level(self) -> LogLevel:
        return LogLevel.ERROR if self.severity == "error" else LogLevel.WARN


class EvaluationLabels(EventLabels):
    """Labels for evaluation batches."""

    kind: ClassVar[EventKind] = EventKind.EVALUATION
    fixed_level: ClassVar[LogLevel] = LogLevel.INFO

    results_count: Optional[int] = None
    issues_count: Optional[int] = None
    critical_count: Optional[int] = None
    evaluation_time_ms: Optional[Union[int, float]] = None


class SessionLabels(EventLabels):
    """Labels for session events."""

    kind: ClassVar[EventKind] = EventKind.SESSION
    fixed_level: ClassVar[LogLevel] = LogLevel.INFO

    action: Optional[str] = None
    user_id: Optional[str] = None
    user_agent: Optional[str] = None


class ErrorLabels(EventLabels):
    """Labels for error events."""

    kind: ClassVar[EventKind] = EventKind.ERROR
    fixed_level: ClassVar[LogLevel] = LogLevel.ERROR

    error: Optional[str] = None
    stack: Optional[str] = None


class AriaLabels(EventLabels):
    """Labels for ARIA violations."""

    kind: ClassVar[EventKind] = EventKind.ARIA
    fixed_level: ClassVar[LogLevel] = LogLevel.WARN

    selector: Optional[str] = None
    issue: Optional[str] = None
    element_info: Optional[ElementInfo] = None
    fix: Optional[str] = None
    page: Optional[str] = None

    def label_values(self) -> Dict[str, Any]:
        values = self.model_dump(by_alias=True, exclude={"session_id", "element_info"})
        values["tagName"] = self.element_info.tag_name if self.element_info else None
        return values


class SummaryData(EventLabels):
    """Accessibility evaluation summary. Every count is required."""

    kind: ClassVar[EventKind] = EventKind.SUMMARY
    fixed_level: ClassVar[LogLevel] = LogLevel.INFO

    total_elements: int = Field(..., description="Elements on the page")
    evaluated_elements: int = Field(..., description="Elements actually evaluated")
    issues: int = Field(..., description="Issues found")
    critical_issues: int = Field(..., description="Critical issues found")
    evaluation_time_ms: Union[int, float] = Field(..., description="Evaluation duration in milliseconds")

    def message(self) -> str:
        return f"Accessibility summary: {self.issues} issues ({self.critical_issues} critical)"

    def to_labels(self) -> Dict[str, LabelValue]:
        return {"type": self.kind.value, **self.label_values()}
