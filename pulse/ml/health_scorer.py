"""
Project Health Scorer

Combines checklist progress, the latest metrics score, the site analyzer
score and feature adoption into a composite 0-100 health score per project.

Health Score Formula (0-100):
  checklist  (0-25): checked items / items in the phase tree
  external   (0-25): latest metrics snapshot overall score
  analyzer   (0-25): analyzer overall score
  features   (0-25): fixed per-feature increments, capped

A component without data (no phase tree, no metrics, no analyzer result) is
skipped, not averaged away: the remaining components are summed as-is.

Status thresholds:
  >= 70  -> Healthy (green)
  40-69  -> At Risk (amber)
  <  40  -> Critical (red)
"""

import math
from collections.abc import Mapping, Sequence

from pulse.core import get_logger
from pulse.domain.checklist import Phase, checklist_stats
from pulse.domain.constants import health_weights
from pulse.domain.health import HealthBreakdown
from pulse.domain.metrics import MetricsSnapshot
from pulse.domain.project import AnalyzerResult, FeatureUsageFacts, ProjectRecord

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (Python's round() is banker's)."""
    return math.floor(value + 0.5)


def _scaled(score_0_100: float) -> float:
    """Scale a 0-100 score to the component range, clamped."""
    fraction = min(max(score_0_100, 0.0), 100.0) / 100
    return fraction * health_weights.COMPONENT_MAX


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def checklist_component(phases: Sequence[Phase] | None, checked: Mapping[str, bool]) -> float | None:
    """Checklist points, or None when no phase tree was supplied. Zero items score 0."""
    if phases is None:
        return None
    return checklist_stats(phases, checked).fraction * health_weights.COMPONENT_MAX


def external_component(history: Sequence[MetricsSnapshot]) -> float | None:
    """Points from the most recent metrics snapshot only."""
    if not history:
        return None
    return _scaled(history[-1].overall_score)


def analyzer_component(analyzer: AnalyzerResult | None) -> float | None:
    if analyzer is None:
        return None
    return _scaled(analyzer.overall_score)


def feature_component(facts: FeatureUsageFacts) -> int:
    """Feature adoption points, capped at the component maximum."""
    usage = 0
    if facts.metrics_runs > 0:
        usage += health_weights.METRICS_RUN
    if facts.monitor_runs > 0:
        usage += health_weights.MONITOR_RUN
    if facts.content_pieces > 0:
        usage += health_weights.CONTENT_WRITTEN
    if facts.schema_generations > 0:
        usage += health_weights.SCHEMA_GENERATED
    if facts.analyzer_runs > 0:
        usage += health_weights.ANALYZER_RUN
    if facts.competitor_count > 0:
        usage += health_weights.HAS_COMPETITOR
    if facts.questionnaire_completed:
        usage += health_weights.QUESTIONNAIRE_COMPLETED
    return min(usage, health_weights.COMPONENT_MAX)


# ---------------------------------------------------------------------------
# Health Scorer
# ---------------------------------------------------------------------------


class HealthScorer:
    """Composite health score for a project.

    Example:
        scorer = HealthScorer()
        breakdown = scorer.score(project, phases)
        print(f"{breakdown.score} ({breakdown.status})")
    """

    def score(self, project: ProjectRecord, phases: Sequence[Phase] | None = None) -> HealthBreakdown:
        """Score one project.

        Args:
            project: Project record
            phases: Checklist phase tree; None skips the checklist component

        Returns:
            HealthBreakdown with the final score and each component
        """
        checklist = checklist_component(phases, project.checked)
        external = external_component(project.metrics_history)
        analyzer = analyzer_component(project.analyzer_result)
        features = feature_component(project.feature_usage())

        total = features + sum(part for part in (checklist, external, analyzer) if part is not None)
        score = min(max(_round_half_up(total), 0), 100)

        breakdown = HealthBreakdown(
            score=score,
            checklist_points=checklist,
            external_points=external,
            analyzer_points=analyzer,
            feature_points=features,
        )
        logger.debug(
            "Scored project health",
            extra={
                "project_id": project.id,
                "score": score,
                "status": breakdown.status,
                "components": breakdown.included_components,
            },
        )
        return breakdown


def compute_health_score(project: ProjectRecord, phases: Sequence[Phase] | None = None) -> int:
    """Composite 0-100 health score for ``project``."""
    return HealthScorer().score(project, phases).score
