"""
Scoring and rule evaluation for project dashboards.

Modules:
- HealthScorer: composite 0-100 project health score
- InsightEngine: rule table producing success/warning/info insights
"""

from .health_scorer import HealthScorer, compute_health_score
from .insight_engine import InsightEngine, InsightRule, build_project_facts, generate_insights

__all__ = [
    "HealthScorer",
    "compute_health_score",
    "InsightEngine",
    "InsightRule",
    "build_project_facts",
    "generate_insights",
]
