"""
Insight domain models

    - Insight: One typed observation shown on the dashboard (never persisted)
    - ProjectFacts: Pre-computed facts the insight rules read
"""

from dataclasses import dataclass
from enum import Enum

from pulse.domain.checklist import ChecklistStats
from pulse.domain.project import FeatureUsageFacts


class InsightType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Insight:
    """
    A generated observation.

    Attributes:
        type: success, warning or info
        text: Headline
        detail: One-sentence explanation
    """

    type: InsightType
    text: str
    detail: str


@dataclass(frozen=True)
class ProjectFacts:
    """
    Everything the insight rules look at, computed once per evaluation.

    Attributes:
        checklist: Checklist completion stats
        score_delta: Point change between the two latest metrics snapshots,
            None with fewer than two snapshots
        engines_citing: Engines citing the project in the latest snapshot
        engines_total: Engines tracked in the latest snapshot
        features: Feature usage facts
        project_age_days: Whole days since creation (0 when unknown)
        metrics_runs: Length of the metrics history
    """

    checklist: ChecklistStats
    score_delta: float | None
    engines_citing: int
    engines_total: int
    features: FeatureUsageFacts
    project_age_days: int
    metrics_runs: int

    @property
    def competitor_count(self) -> int:
        return self.features.competitor_count
