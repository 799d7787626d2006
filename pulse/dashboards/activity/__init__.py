"""Activity feed and activity descriptions"""

from pulse.dashboards.activity.classifier import RenderHint, avatar_color, describe, initials, rendering_hint
from pulse.dashboards.activity.feed import ActivityFeed, DateGroup, FeedState, FeedView

__all__ = [
    "ActivityFeed",
    "DateGroup",
    "FeedState",
    "FeedView",
    "RenderHint",
    "avatar_color",
    "describe",
    "initials",
    "rendering_hint",
]
