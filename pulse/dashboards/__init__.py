"""
Dashboard computations - values the presentation layer renders

This package contains:
    - activity: Activity descriptions, rendering hints and the filtered feed
    - trends: Deltas, rolling series, weekly velocity and engine coverage

Usage:
    from pulse.dashboards.activity import ActivityFeed, describe
    from pulse.dashboards.trends import compute_trend
"""

__all__: list[str] = []
