"""
Insight engine for the project dashboard.

Evaluates a fixed table of rules against pre-computed project facts and
returns every insight whose rule matches, in table order. Rules only read
``ProjectFacts``; scores and trends are computed once, before evaluation.

Usage::

    from pulse.ml.insight_engine import InsightEngine, build_project_facts

    facts = build_project_facts(project, phases, now)
    insights = InsightEngine().evaluate(facts)
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from pulse.core import get_logger
from pulse.dashboards.trends.calculator import EngineCoverage, engine_coverage, score_delta
from pulse.domain.checklist import Phase, checklist_stats
from pulse.domain.constants import insight_thresholds
from pulse.domain.insights import Insight, InsightType, ProjectFacts
from pulse.domain.project import ProjectRecord
from pulse.utils.datetime_utils import days_between

logger = get_logger(__name__)


@dataclass(frozen=True)
class InsightRule:
    """A predicate over project facts and the insight it emits."""

    name: str
    type: InsightType
    applies: Callable[[ProjectFacts], bool]
    text: Callable[[ProjectFacts], str]
    detail: Callable[[ProjectFacts], str]

    def evaluate(self, facts: ProjectFacts) -> Insight | None:
        if not self.applies(facts):
            return None
        return Insight(type=self.type, text=self.text(facts), detail=self.detail(facts))


def _points(value: float | None) -> str:
    return f"{abs(value or 0):g}"


def _plural_runs(count: int) -> str:
    return f"{count} metrics run{'' if count == 1 else 's'}"


def _checklist_complete(f: ProjectFacts) -> bool:
    return f.checklist.total > 0 and f.checklist.done == f.checklist.total


def _checklist_in_progress(f: ProjectFacts) -> bool:
    return 0 < f.checklist.done < f.checklist.total


def _stagnant(f: ProjectFacts) -> bool:
    return (
        f.project_age_days > insight_thresholds.STAGNANT_AGE_DAYS
        and f.metrics_runs < insight_thresholds.MIN_METRICS_RUNS
    )


# ---------------------------------------------------------------------------
# Built-in rules
# ---------------------------------------------------------------------------

INSIGHT_RULES: list[InsightRule] = [
    InsightRule(
        name="checklist_complete",
        type=InsightType.SUCCESS,
        applies=_checklist_complete,
        text=lambda f: "Checklist complete!",
        detail=lambda f: "All optimization tasks are done. Focus on monitoring and metrics.",
    ),
    InsightRule(
        name="checklist_remaining",
        type=InsightType.INFO,
        applies=_checklist_in_progress,
        text=lambda f: f"{f.checklist.remaining} tasks remaining",
        detail=lambda f: f"{f.checklist.pct}% complete, {f.checklist.done} of {f.checklist.total} tasks done.",
    ),
    InsightRule(
        name="score_up",
        type=InsightType.SUCCESS,
        applies=lambda f: f.score_delta is not None and f.score_delta > 0,
        text=lambda f: f"Score up {_points(f.score_delta)} points",
        detail=lambda f: "Your score is improving. Keep up the momentum.",
    ),
    InsightRule(
        name="score_down",
        type=InsightType.WARNING,
        applies=lambda f: f.score_delta is not None and f.score_delta < 0,
        text=lambda f: f"Score dropped {_points(f.score_delta)} points",
        detail=lambda f: "Review recent changes and check for content or technical issues.",
    ),
    InsightRule(
        name="engines_not_citing",
        type=InsightType.INFO,
        applies=lambda f: f.engines_total > 0 and f.engines_citing < f.engines_total,
        text=lambda f: f"{f.engines_total - f.engines_citing} engines not citing you",
        detail=lambda f: "Expand your content and schema to increase coverage across all AI engines.",
    ),
    InsightRule(
        name="no_content",
        type=InsightType.INFO,
        applies=lambda f: f.features.content_pieces == 0 and f.features.schema_generations == 0,
        text=lambda f: "No content generated yet",
        detail=lambda f: "Use the Content Writer and Schema Generator to create AI-optimized content.",
    ),
    InsightRule(
        name="no_competitors",
        type=InsightType.INFO,
        applies=lambda f: f.competitor_count == 0,
        text=lambda f: "No competitors tracked",
        detail=lambda f: "Add competitors to see how you stack up against the competition.",
    ),
    InsightRule(
        name="low_metrics_frequency",
        type=InsightType.WARNING,
        applies=_stagnant,
        text=lambda f: "Low metrics frequency",
        detail=lambda f: (
            f"Project is {f.project_age_days} days old with only {_plural_runs(f.metrics_runs)}. "
            "Run analyses regularly."
        ),
    ),
    InsightRule(
        name="full_adoption",
        type=InsightType.SUCCESS,
        applies=lambda f: f.features.features_used == f.features.total_features,
        text=lambda f: "Full feature adoption!",
        detail=lambda f: "You're using all available features. Keep monitoring for continued improvement.",
    ),
]


class InsightEngine:
    """Evaluates insight rules against project facts."""

    def __init__(self, rules: Sequence[InsightRule] | None = None) -> None:
        self.rules = list(rules) if rules is not None else INSIGHT_RULES

    def evaluate(self, facts: ProjectFacts) -> list[Insight]:
        """Every matching insight, in rule order. There is no cap."""
        insights = []
        for rule in self.rules:
            insight = rule.evaluate(facts)
            if insight is not None:
                insights.append(insight)

        logger.debug(
            "Evaluated insight rules",
            extra={"rules": len(self.rules), "matched": len(insights)},
        )
        return insights


def generate_insights(facts: ProjectFacts) -> list[Insight]:
    return InsightEngine().evaluate(facts)


def project_age_days(created_at: datetime | None, now: datetime) -> int:
    """
    Whole days since creation, at least 1 once a creation date is known.

    Returns 0 when the creation date is unknown.
    """
    if created_at is None:
        return 0
    return max(1, math.floor(days_between(created_at, now)))


def build_project_facts(
    project: ProjectRecord,
    phases: Sequence[Phase] | None,
    now: datetime,
    coverage: EngineCoverage | None = None,
) -> ProjectFacts:
    """
    Compute the facts the insight rules read, once.

    Args:
        project: Project record
        phases: Checklist phase tree (None counts as an empty checklist)
        now: Reference time for the project's age
        coverage: Engine coverage already computed for the trends view;
            derived from the metrics history when omitted
    """
    if coverage is None:
        coverage = engine_coverage(project.metrics_history)
    return ProjectFacts(
        checklist=checklist_stats(phases or (), project.checked),
        score_delta=score_delta(project.metrics_history),
        engines_citing=coverage.citing,
        engines_total=coverage.total,
        features=project.feature_usage(),
        project_age_days=project_age_days(project.created_at, now),
        metrics_runs=len(project.metrics_history),
    )
