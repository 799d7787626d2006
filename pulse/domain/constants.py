#!/usr/bin/env python3
"""
Application Constants

Centralized constants for scoring weights, feed pagination, trend windows,
insight thresholds and scheduler timing. Immutable, shared by the engines and
overridable through ``pulse.secure_config`` where a deployment needs to.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthScoreWeights:
    """
    Health score composition.

    Four components of at most COMPONENT_MAX points each. Feature adoption is
    accumulated from fixed per-feature increments and capped at COMPONENT_MAX.
    All increments used sum to exactly 25 (4 * 5 + 3 + 2).

    Example:
        >>> health_weights.COMPONENT_MAX
        25
    """

    COMPONENT_MAX: int = 25
    """Points available to each of the four components"""

    METRICS_RUN: int = 4
    MONITOR_RUN: int = 4
    CONTENT_WRITTEN: int = 4
    SCHEMA_GENERATED: int = 4
    ANALYZER_RUN: int = 4
    HAS_COMPETITOR: int = 3
    QUESTIONNAIRE_COMPLETED: int = 2

    HEALTHY_THRESHOLD: int = 70
    """Scores >= 70 are Healthy"""

    AT_RISK_THRESHOLD: int = 40
    """Scores >= 40 (and < 70) are At Risk; below is Critical"""


@dataclass(frozen=True)
class FeedConfig:
    """
    Activity feed pagination.

    Attributes:
        PAGE_SIZE: Items visible before "show more" and after any filter change
        PAGE_INCREMENT: Items added by each "show more"
    """

    PAGE_SIZE: int = 10
    PAGE_INCREMENT: int = 10


@dataclass(frozen=True)
class TrendConfig:
    """
    Trend window sizes.

    Attributes:
        ROLLING_WINDOW: Snapshots in the dashboard score series
        METRICS_VIEW_WINDOW: Snapshots in the metrics view history chart
        CITATION_SHARE_WINDOW: Snapshots in the citation share trend
        VELOCITY_WEEKS: Non-empty weeks kept in the velocity chart
        MIN_TREND_POINTS: Points needed before a series supports a trend line
        STABLE_SLOPE: Score points/day below which a trend counts as stable
    """

    ROLLING_WINDOW: int = 12
    METRICS_VIEW_WINDOW: int = 14
    CITATION_SHARE_WINDOW: int = 30
    VELOCITY_WEEKS: int = 8
    MIN_TREND_POINTS: int = 2
    STABLE_SLOPE: float = 0.1


@dataclass(frozen=True)
class InsightThresholds:
    """
    Thresholds used by the insight rules.

    Attributes:
        STAGNANT_AGE_DAYS: Project age (days) after which sparse measurement is flagged
        MIN_METRICS_RUNS: Metrics runs expected once a project is past STAGNANT_AGE_DAYS
    """

    STAGNANT_AGE_DAYS: int = 30
    MIN_METRICS_RUNS: int = 2


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Recheck scheduler timing.

    Attributes:
        POLL_SECONDS: Fixed polling period, independent of the check interval
        STARTUP_DELAY_SECONDS: Debounce before the first tick after state load
    """

    POLL_SECONDS: float = 15 * 60
    STARTUP_DELAY_SECONDS: float = 5


@dataclass(frozen=True)
class HistoryRetention:
    """
    Retention limits applied when building new history collections.

    Attributes:
        ACTIVITY_LOG_MAX: Newest activity entries kept in a project's log
    """

    ACTIVITY_LOG_MAX: int = 200


# Default instances
health_weights = HealthScoreWeights()
feed_config = FeedConfig()
trend_config = TrendConfig()
insight_thresholds = InsightThresholds()
scheduler_config = SchedulerConfig()
history_retention = HistoryRetention()
