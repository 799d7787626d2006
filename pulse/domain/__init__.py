"""
Domain Models - Immutable value objects read and produced by the engines

This package contains dataclasses representing business domain concepts:
    - metrics: MetricSnapshot, MetricsSnapshot, TrendData
    - activity: ActivityKind, ActivityRecord, Author
    - checklist: Phase, Category, ChecklistItem, ChecklistStats
    - project: ProjectRecord, CitationShareSnapshot, FeatureUsageFacts
    - health: HealthBreakdown
    - insights: Insight, InsightType, ProjectFacts

Usage:
    from pulse.domain.project import ProjectRecord

    project = ProjectRecord.from_dict(document)
    if project.latest_metrics:
        print(project.latest_metrics.overall_score)
"""

# Import domain models for convenient access
from .activity import ActivityKind, ActivityRecord, Author
from .checklist import Category, ChecklistItem, ChecklistStats, Phase, PhaseProgress
from .health import HealthBreakdown
from .insights import Insight, InsightType, ProjectFacts
from .metrics import MetricSnapshot, MetricsSnapshot, TrendData
from .project import CitationShareSnapshot, FeatureUsageFacts, ProjectRecord

__all__ = [
    # Base classes
    "MetricSnapshot",
    "TrendData",
    # Metrics and project
    "MetricsSnapshot",
    "CitationShareSnapshot",
    "FeatureUsageFacts",
    "ProjectRecord",
    # Activity
    "ActivityKind",
    "ActivityRecord",
    "Author",
    # Checklist
    "Phase",
    "Category",
    "ChecklistItem",
    "ChecklistStats",
    "PhaseProgress",
    # Derived
    "HealthBreakdown",
    "Insight",
    "InsightType",
    "ProjectFacts",
]
