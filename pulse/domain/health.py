"""
Project Health domain models

Composite health scoring combining up to four independent signals:
- Checklist completion
- Latest external metrics score
- Site analyzer score
- Feature adoption breadth

Used by the dashboard to show a single 0-100 health score per project.
"""

from dataclasses import dataclass

from pulse.domain.constants import health_weights


def health_status(score: float) -> str:
    """Map numeric score to status label."""
    if score >= health_weights.HEALTHY_THRESHOLD:
        return "Healthy"
    elif score >= health_weights.AT_RISK_THRESHOLD:
        return "At Risk"
    return "Critical"


@dataclass(frozen=True)
class HealthBreakdown:
    """Composite health score and the component points behind it.

    A component that is not included (no phase tree, no metrics history, no
    analyzer result) is ``None`` rather than 0 so the presentation layer can
    tell "not measured" apart from "measured as zero". Feature adoption is
    always included.

    Attributes:
        score: Final score, rounded and clamped to 0-100
        checklist_points: Checklist component (0-25) or None
        external_points: Latest metrics snapshot component (0-25) or None
        analyzer_points: Analyzer component (0-25) or None
        feature_points: Feature adoption component (0-25)

    Example:
        breakdown = HealthBreakdown(
            score=64,
            checklist_points=25.0,
            external_points=20.0,
            analyzer_points=15.0,
            feature_points=4,
        )
        breakdown.status  # "At Risk"
    """

    score: int
    checklist_points: float | None
    external_points: float | None
    analyzer_points: float | None
    feature_points: int

    @property
    def status(self) -> str:
        return health_status(self.score)

    @property
    def status_class(self) -> str:
        """CSS class for status badge."""
        if self.status == "Healthy":
            return "status-good"
        elif self.status == "At Risk":
            return "status-caution"
        return "status-action"

    @property
    def included_components(self) -> int:
        parts = (self.checklist_points, self.external_points, self.analyzer_points)
        return 1 + sum(1 for part in parts if part is not None)
