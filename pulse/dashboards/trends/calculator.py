"""Trends calculation logic for the project dashboard

Extracts and calculates trends from a project's histories:
- Period-over-period percent deltas with a distinct "no trend" state
- Rolling score/citation/prompt series over the last N snapshots
- Weekly completion velocity (Sunday-start weeks)
- AI engine citation coverage from the latest snapshot
- Citation share-of-voice rows per brand
"""

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo

from pulse.core import get_logger
from pulse.domain.activity import ActivityKind, ActivityRecord
from pulse.domain.constants import trend_config
from pulse.domain.metrics import EngineCitations, MetricsSnapshot, TrendData, percent_delta
from pulse.domain.project import CitationShareSnapshot
from pulse.secure_config import SecureConfig, get_config
from pulse.utils.datetime_utils import short_date, week_bucket_key, week_bucket_label

logger = get_logger(__name__)


@dataclass(frozen=True)
class SeriesPoint:
    date_label: str
    timestamp: datetime
    score: float
    citations: int
    prompts: int


@dataclass(frozen=True)
class RollingSeries:
    """
    The last N snapshots as chart points, oldest first.

    ``sufficient`` is False with fewer than two points: an empty series and
    a single point are both too little for a trend line, but the caller can
    still tell them apart through ``points``.
    """

    points: tuple[SeriesPoint, ...] = ()
    sufficient: bool = False

    @property
    def scores(self) -> list[float]:
        return [p.score for p in self.points]

    def as_trend_data(self) -> TrendData:
        return TrendData(values=self.scores, timestamps=[p.timestamp for p in self.points], label="Score")


@dataclass(frozen=True)
class VelocityBucket:
    week_start: date
    label: str
    count: int


@dataclass(frozen=True)
class EngineCoverage:
    """
    Engines citing the project in the latest snapshot.

    Attributes:
        citing: Engines with at least one citation
        total: Engines reported
        engines: Per-engine breakdown as reported
    """

    citing: int = 0
    total: int = 0
    engines: tuple[EngineCitations, ...] = ()

    @property
    def not_citing(self) -> int:
        return self.total - self.citing

    @property
    def ratio(self) -> float:
        return self.citing / self.total if self.total > 0 else 0.0


@dataclass(frozen=True)
class CitationShareRow:
    date_label: str
    timestamp: datetime
    shares: Mapping[str, float] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class TrendSummary:
    """
    Everything the trend widgets show.

    Attributes:
        series: Rolling score series
        delta: Percent change between the two latest scores, None for "no trend"
        velocity: Weekly completion counts, oldest week first
        engine_coverage: Latest engine citation coverage
        direction: "improving" / "stable" / "worsening", None if insufficient data
    """

    series: RollingSeries
    delta: float | None
    velocity: tuple[VelocityBucket, ...]
    engine_coverage: EngineCoverage
    direction: str | None


def delta(curr: float | None, prev: float | None) -> float | None:
    """
    Percent change from ``prev`` to ``curr`` rounded to one decimal.

    Returns None ("no trend") when ``prev`` is missing or zero, which is not
    the same as a 0.0 change.

    Examples:
        >>> delta(55, 50)
        10.0
        >>> delta(50, 50)
        0.0
        >>> delta(50, 0) is None
        True
    """
    return percent_delta(curr, prev)


def score_delta(history: Sequence[MetricsSnapshot]) -> float | None:
    """Point difference between the two latest snapshots' scores."""
    if len(history) < 2:
        return None
    return history[-1].overall_score - history[-2].overall_score


def rolling_series(history: Sequence[MetricsSnapshot], window: int = trend_config.ROLLING_WINDOW) -> RollingSeries:
    """
    Map the last ``window`` snapshots to chart points in capture order.

    Args:
        history: Metrics history, capture order
        window: Snapshots to keep (12 on the dashboard, 14 in the metrics view)
    """
    recent = list(history[-window:]) if window > 0 else []
    points = tuple(
        SeriesPoint(
            date_label=short_date(snapshot.timestamp),
            timestamp=snapshot.timestamp,
            score=snapshot.overall_score,
            citations=snapshot.citations.total,
            prompts=snapshot.prompts.total,
        )
        for snapshot in recent
    )
    return RollingSeries(points=points, sufficient=len(points) >= trend_config.MIN_TREND_POINTS)


def weekly_velocity(
    log: Sequence[ActivityRecord],
    max_buckets: int = trend_config.VELOCITY_WEEKS,
    tz: tzinfo | None = None,
) -> list[VelocityBucket]:
    """
    Checklist completions per Sunday-start week.

    Only ``check`` entries count. Buckets are ordered oldest first regardless
    of the log's order, and only the latest ``max_buckets`` non-empty weeks
    are kept. A log without completions gives an empty list.

    Args:
        log: Activity log (any order)
        max_buckets: Most recent weeks to keep
        tz: Calendar timezone for week boundaries (default: each timestamp's own)
    """
    counts = Counter(week_bucket_key(r.timestamp, tz) for r in log if r.kind == ActivityKind.CHECK)
    if not counts or max_buckets <= 0:
        return []

    weeks = sorted(counts)[-max_buckets:]
    return [VelocityBucket(week_start=w, label=week_bucket_label(w), count=counts[w]) for w in weeks]


def engine_coverage(history: Sequence[MetricsSnapshot]) -> EngineCoverage:
    """Citing/total engine counts from the latest snapshot (zeros with no history)."""
    if not history:
        return EngineCoverage()
    latest = history[-1]
    return EngineCoverage(
        citing=latest.citing_engines,
        total=len(latest.citations.by_engine),
        engines=latest.citations.by_engine,
    )


def citation_share_trend(
    history: Sequence[CitationShareSnapshot],
    window: int = trend_config.CITATION_SHARE_WINDOW,
) -> list[CitationShareRow]:
    """
    Share-of-voice percent per brand for the last ``window`` snapshots.

    Returns an empty list with fewer than two snapshots.
    """
    if len(history) < trend_config.MIN_TREND_POINTS:
        return []
    return [
        CitationShareRow(
            date_label=short_date(snapshot.timestamp),
            timestamp=snapshot.timestamp,
            shares={brand.name: brand.share_percent for brand in snapshot.brands.values()},
        )
        for snapshot in history[-window:]
    ]


class TrendsCalculator:
    """Calculate trend statistics for one project's dashboard"""

    def __init__(
        self,
        window: int = trend_config.ROLLING_WINDOW,
        velocity_weeks: int = trend_config.VELOCITY_WEEKS,
        stable_slope: float = trend_config.STABLE_SLOPE,
    ):
        """Initialize calculator

        Args:
            window: Snapshots in the rolling series
            velocity_weeks: Non-empty weeks kept in the velocity chart
            stable_slope: Score points/day below which the direction is "stable"
        """
        self.window = window
        self.velocity_weeks = velocity_weeks
        self.stable_slope = stable_slope

    @classmethod
    def from_config(cls, config: SecureConfig | None = None) -> "TrendsCalculator":
        settings = (config or get_config()).get_trend_config()
        return cls(window=settings.window, velocity_weeks=settings.velocity_weeks)

    def calculate(
        self,
        metrics_history: Sequence[MetricsSnapshot],
        activity_log: Sequence[ActivityRecord] = (),
    ) -> TrendSummary:
        """Calculate all trend statistics

        Args:
            metrics_history: Metrics snapshots, capture order
            activity_log: Activity log for the velocity chart

        Returns:
            TrendSummary
        """
        series = rolling_series(metrics_history, self.window)
        latest = metrics_history[-1].overall_score if metrics_history else None
        previous = metrics_history[-2].overall_score if len(metrics_history) > 1 else None

        direction = series.as_trend_data().direction(tolerance=self.stable_slope) if series.sufficient else None

        summary = TrendSummary(
            series=series,
            delta=delta(latest, previous),
            velocity=tuple(weekly_velocity(activity_log, self.velocity_weeks)),
            engine_coverage=engine_coverage(metrics_history),
            direction=direction,
        )
        logger.debug(
            "Calculated trends",
            extra={
                "snapshots": len(metrics_history),
                "series_points": len(series.points),
                "velocity_weeks": len(summary.velocity),
                "direction": direction,
            },
        )
        return summary


def compute_trend(
    metrics_history: Sequence[MetricsSnapshot],
    activity_log: Sequence[ActivityRecord] = (),
    window: int = trend_config.ROLLING_WINDOW,
) -> TrendSummary:
    """Convenience wrapper around TrendsCalculator with default settings."""
    return TrendsCalculator(window=window).calculate(metrics_history, activity_log)
