"""
Project analytics entry points

The functions the surrounding application calls. Each takes read-only
project data plus an explicit ``now`` where dates matter, and returns fresh
value objects; nothing here performs I/O or keeps state between calls.

Usage:
    from pulse.analytics import build_dashboard

    project = ProjectRecord.from_dict(document)
    dashboard = build_dashboard(project, phases, now=datetime.now(UTC))
    print(dashboard.health.score, [i.text for i in dashboard.insights])
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from pulse.core import get_logger
from pulse.dashboards.activity.classifier import describe
from pulse.dashboards.activity.feed import ALL, ActivityFeed, FeedView
from pulse.dashboards.trends.calculator import (
    CitationShareRow,
    TrendsCalculator,
    TrendSummary,
    citation_share_trend,
    compute_trend,
)
from pulse.domain.activity import ActivityRecord
from pulse.domain.checklist import Phase, PhaseProgress, phase_progress
from pulse.domain.constants import feed_config
from pulse.domain.health import HealthBreakdown
from pulse.domain.insights import Insight, ProjectFacts
from pulse.domain.project import FeatureUsage, ProjectRecord
from pulse.ml.health_scorer import HealthScorer, compute_health_score
from pulse.ml.insight_engine import InsightEngine, build_project_facts, generate_insights
from pulse.scheduler.recheck import scheduler_tick

logger = get_logger(__name__)

__all__ = [
    "DashboardSnapshot",
    "build_activity_feed",
    "build_dashboard",
    "build_project_facts",
    "compute_health_score",
    "compute_trend",
    "describe_activity",
    "generate_insights",
    "scheduler_tick",
]


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Every computed value the dashboard renders for one project.

    Attributes:
        health: Composite health score and its components
        trend: Rolling series, delta, velocity and engine coverage
        facts: Facts the insights were generated from
        insights: Matching insights, rule order
        phase_progress: Per-phase checklist completion
        feature_usage: The six product features with used/count
        citation_share: Per-brand share rows (empty with < 2 snapshots)
    """

    health: HealthBreakdown
    trend: TrendSummary
    facts: ProjectFacts
    insights: tuple[Insight, ...]
    phase_progress: tuple[PhaseProgress, ...]
    feature_usage: tuple[FeatureUsage, ...]
    citation_share: tuple[CitationShareRow, ...]


def build_activity_feed(
    log: Sequence[ActivityRecord],
    filter_group: str = ALL,
    filter_user: str | None = ALL,
    visible_count: int = feed_config.PAGE_SIZE,
    *,
    now: datetime,
) -> FeedView:
    """
    One-shot feed computation for a given filter and cursor.

    Args:
        log: Activity log, newest first
        filter_group: Filter group name ("all", "checklist", ...)
        filter_user: Author id or "all"
        visible_count: Entries to show
        now: Reference time for date labels

    Raises:
        ValueError: If ``filter_group`` is unknown
    """
    feed = ActivityFeed()
    feed.set_filter_group(filter_group)
    feed.set_filter_user(filter_user)
    feed.visible_count = max(0, visible_count)
    return feed.build(log, now)


def describe_activity(record: ActivityRecord, viewer_uid: str | None = None) -> str:
    return describe(record, viewer_uid)


def build_dashboard(project: ProjectRecord, phases: Sequence[Phase] | None, now: datetime) -> DashboardSnapshot:
    """
    Compute everything the project dashboard shows, once.

    Health and trends are computed first; insights read the facts built
    from the same project data and never recompute them.
    """
    health = HealthScorer().score(project, phases)
    trend = TrendsCalculator().calculate(project.metrics_history, project.activity_log)
    facts = build_project_facts(project, phases, now, coverage=trend.engine_coverage)
    insights = InsightEngine().evaluate(facts)

    logger.info(
        "Built project dashboard",
        extra={
            "project_id": project.id,
            "health_score": health.score,
            "insights": len(insights),
            "snapshots": len(project.metrics_history),
        },
    )
    return DashboardSnapshot(
        health=health,
        trend=trend,
        facts=facts,
        insights=tuple(insights),
        phase_progress=tuple(phase_progress(phases or (), project.checked)),
        feature_usage=tuple(project.feature_usage().table()),
        citation_share=tuple(citation_share_trend(project.citation_share_history)),
    )
