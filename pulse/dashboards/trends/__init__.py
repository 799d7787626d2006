"""Trends calculation logic"""

from pulse.dashboards.trends.calculator import TrendsCalculator, TrendSummary, compute_trend

__all__ = ["TrendsCalculator", "TrendSummary", "compute_trend"]
