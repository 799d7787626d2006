"""
Base domain models for metrics

Provides foundation classes for metric time series:
    - MetricSnapshot: Point-in-time measurement base class
    - MetricsSnapshot: One analysis run (overall score, citations, prompts)
    - TrendData: Time series data with helper methods
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from pulse.utils.datetime_utils import ensure_aware, parse_iso_timestamp


@dataclass(frozen=True)
class MetricSnapshot:
    """
    Base class for point-in-time snapshots.

    Attributes:
        timestamp: When this measurement was captured (timezone-aware)
    """

    timestamp: datetime

    def __post_init__(self) -> None:
        """
        Validate timestamp is a datetime object and attach UTC if naive.

        Raises:
            TypeError: If timestamp is not a datetime instance

        Example:
            >>> MetricSnapshot(timestamp=datetime(2026, 1, 1))  # Valid
            >>> MetricSnapshot(timestamp="2026-01-01")  # Raises TypeError
        """
        if not isinstance(self.timestamp, datetime):
            raise TypeError(f"timestamp must be datetime, got {type(self.timestamp)}")
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))


@dataclass(frozen=True)
class EngineCitations:
    """Citation count reported by a single AI engine."""

    engine: str
    citations: int = 0


@dataclass(frozen=True)
class CitationSummary:
    total: int = 0
    by_engine: tuple[EngineCitations, ...] = ()


@dataclass(frozen=True)
class PromptSummary:
    total: int = 0
    by_category: Mapping[str, int] = field(default_factory=dict, hash=False)


def as_number(value: Any, default: float = 0) -> float:
    """Coerce a raw numeric field, falling back for None/garbage."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        return value
    return default


@dataclass(frozen=True, kw_only=True)
class MetricsSnapshot(MetricSnapshot):
    """
    One metrics analysis run for a project.

    Snapshots accumulate append-only in capture order; that ordered sequence
    is the project's metrics history.

    Attributes:
        timestamp: Capture time (inherited from MetricSnapshot)
        overall_score: Composite visibility score 0-100
        citations: Citation totals and the per-engine breakdown
        prompts: Prompt totals and per-category counts

    Example:
        snapshot = MetricsSnapshot(
            timestamp=datetime(2026, 3, 1, tzinfo=UTC),
            overall_score=72,
            citations=CitationSummary(
                total=14,
                by_engine=(EngineCitations("ChatGPT", 9), EngineCitations("Perplexity", 5)),
            ),
        )
    """

    overall_score: float = 0
    citations: CitationSummary = field(default_factory=CitationSummary)
    prompts: PromptSummary = field(default_factory=PromptSummary)

    @property
    def citing_engines(self) -> int:
        """Number of engines with at least one citation."""
        return sum(1 for e in self.citations.by_engine if e.citations > 0)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MetricsSnapshot":
        """
        Build a snapshot from a stored metrics document.

        Missing numeric fields fall back to 0 and missing collections to empty.

        Raises:
            ValueError: If the timestamp is missing or not ISO 8601
        """
        timestamp = parse_iso_timestamp(raw.get("timestamp") or raw.get("date"))
        if timestamp is None:
            raise ValueError("metrics snapshot is missing a timestamp")

        citations = raw.get("citations") or {}
        by_engine = tuple(
            EngineCitations(
                engine=str(entry.get("engine") or "unknown"),
                citations=int(as_number(entry.get("citations"))),
            )
            for entry in citations.get("byEngine") or []
            if isinstance(entry, Mapping)
        )

        prompts = raw.get("prompts") or {}
        by_category = prompts.get("byCategory") or {}
        if not by_category and isinstance(prompts.get("topPrompts"), list):
            # Older snapshots only kept the top prompts; count them per category
            by_category = {}
            for prompt in prompts["topPrompts"]:
                if isinstance(prompt, Mapping):
                    key = str(prompt.get("category") or "general")
                    by_category[key] = by_category.get(key, 0) + 1

        return cls(
            timestamp=timestamp,
            overall_score=as_number(raw.get("overallScore")),
            citations=CitationSummary(total=int(as_number(citations.get("total"))), by_engine=by_engine),
            prompts=PromptSummary(
                total=int(as_number(prompts.get("total"))),
                by_category={str(k): int(as_number(v)) for k, v in by_category.items()},
            ),
        )


@dataclass
class TrendData:
    """
    Time series data for a metric with helper methods.

    Attributes:
        values: Metric values (chronological order)
        timestamps: Corresponding timestamps
        label: Optional label for the metric (e.g., "Score", "Citations")

    Example:
        trend = TrendData(values=[50, 55, 61], timestamps=[d1, d2, d3], label="Score")
        trend.percent_change()  # 10.9
        trend.direction()       # "improving"
    """

    values: list[float]
    timestamps: list[datetime]
    label: str | None = None

    def __post_init__(self) -> None:
        """
        Validate that values and timestamps have same length.

        Raises:
            ValueError: If values and timestamps arrays have different lengths
        """
        if len(self.values) != len(self.timestamps):
            raise ValueError(
                f"values and timestamps must have same length: " f"{len(self.values)} != {len(self.timestamps)}"
            )

    def latest(self) -> float | None:
        """Most recent value, or None if no data."""
        return self.values[-1] if self.values else None

    def previous(self) -> float | None:
        """Second most recent value, or None with fewer than two points."""
        return self.values[-2] if len(self.values) > 1 else None

    def change(self) -> float | None:
        """
        Latest value minus previous value.

        Returns:
            Absolute change, or None if insufficient data
        """
        if len(self.values) < 2:
            return None
        return self.values[-1] - self.values[-2]

    def percent_change(self) -> float | None:
        """
        Percent change from previous to latest, rounded to one decimal.

        Returns:
            Percent change, or None if insufficient data or previous value is zero
        """
        return percent_delta(self.latest(), self.previous())

    def get_range(self, n: int) -> "TrendData":
        """
        Get last N data points.

        Returns:
            New TrendData with only the last N points (self if n covers everything)
        """
        if n >= len(self.values):
            return self
        if n <= 0:
            return TrendData(values=[], timestamps=[], label=self.label)
        return TrendData(values=self.values[-n:], timestamps=self.timestamps[-n:], label=self.label)

    def slope_per_day(self) -> float | None:
        """
        Least-squares slope of the series in units per day.

        Returns:
            Slope, or None with fewer than two points or all points at one instant
        """
        if len(self.values) < 2:
            return None

        origin = self.timestamps[0]
        x = np.array([(t - origin).total_seconds() / 86400 for t in self.timestamps], dtype=float)
        if float(np.ptp(x)) == 0.0:
            return None
        y = np.array(self.values, dtype=float)
        slope, _intercept = np.polyfit(x, y, 1)
        return float(slope)

    def direction(self, higher_is_better: bool = True, tolerance: float = 0.1) -> str | None:
        """
        Classify the series as improving, stable or worsening.

        Args:
            higher_is_better: True for scores and citation counts
            tolerance: Slopes with absolute value below this (units/day) count as stable

        Returns:
            "improving", "stable", "worsening", or None if insufficient data
        """
        slope = self.slope_per_day()
        if slope is None:
            return None
        if abs(slope) < tolerance:
            return "stable"
        rising = slope > 0
        return "improving" if rising == higher_is_better else "worsening"


def percent_delta(current: float | None, previous: float | None) -> float | None:
    """
    Period-over-period percent change.

    Returns ``None`` ("no trend") when there is no previous value or it is
    zero, which callers must keep distinct from a real 0.0% change.

    Examples:
        >>> percent_delta(55, 50)
        10.0
        >>> percent_delta(50, 50)
        0.0
        >>> percent_delta(50, None)
    """
    if current is None or previous is None or previous == 0:
        return None
    return round(((current - previous) / previous) * 100, 1)
