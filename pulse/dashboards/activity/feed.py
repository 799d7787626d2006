"""
Activity feed

Filters, paginates and groups a project's activity log for display:
- Named filter groups (each a set of activity kinds) and an author filter
- Distinct author facet values for the author filter
- "Show more" pagination with a fixed increment
- Consecutive grouping by calendar-day label ("Today", "Yesterday", "Mar 5")

The log is expected newest-first; the feed never reorders it.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pulse.core import get_logger
from pulse.domain.activity import ActivityKind, ActivityRecord, Author
from pulse.domain.constants import feed_config
from pulse.secure_config import SecureConfig, get_config
from pulse.utils.datetime_utils import date_label

logger = get_logger(__name__)

ALL = "all"


def _kinds(*kinds: ActivityKind) -> frozenset[str]:
    return frozenset(kind.value for kind in kinds)


# Logged type strings per filter group. Some tools log finer-grained types
# than ActivityKind models; they are listed by name so they still filter.
FILTER_GROUPS: dict[str, frozenset[str] | None] = {
    ALL: None,
    "checklist": _kinds(ActivityKind.CHECK, ActivityKind.UNCHECK, ActivityKind.NOTE, ActivityKind.PHASE_COMPLETE),
    "analysis": _kinds(ActivityKind.ANALYZE, ActivityKind.GENERATE_FIX)
    | {"analyzePageUrl", "analyzePageBatch", "generatePageFix"},
    "monitoring": _kinds(ActivityKind.MONITOR),
    "competitors": _kinds(
        ActivityKind.COMPETITOR_ADD,
        ActivityKind.COMPETITOR_REMOVE,
        ActivityKind.COMPETITOR_MONITOR,
        ActivityKind.CITATION_SHARE_CHECK,
    ),
    "content": _kinds(ActivityKind.CONTENT_WRITE, ActivityKind.SCHEMA_GENERATE, ActivityKind.BRIEF_GENERATE)
    | {"calendarPublish"},
    "team": _kinds(
        ActivityKind.MEMBER_ADD,
        ActivityKind.MEMBER_REMOVE,
        ActivityKind.ROLE_CHANGE,
        ActivityKind.TASK_ASSIGN,
        ActivityKind.TASK_UNASSIGN,
        ActivityKind.COMMENT,
    ),
    "alerts": _kinds(ActivityKind.SCORE_DROP, ActivityKind.SCORE_IMPROVE),
    "export": _kinds(ActivityKind.EXPORT),
}


class FeedState(str, Enum):
    """What the feed has to show."""

    EMPTY = "empty"
    """The project has no activity at all"""

    NO_MATCHES = "no_matches"
    """Activity exists but none matches the current filters"""

    READY = "ready"


@dataclass(frozen=True)
class DateGroup:
    label: str
    items: tuple[ActivityRecord, ...]


@dataclass(frozen=True)
class FeedView:
    """
    Everything the presentation layer needs to render the feed.

    Attributes:
        groups: Visible activity grouped by consecutive date label
        has_more: More matching activity exists beyond the visible slice
        authors: Values for the author filter
        state: EMPTY, NO_MATCHES or READY
        remaining: Matching entries not yet visible
    """

    groups: tuple[DateGroup, ...]
    has_more: bool
    authors: tuple[Author, ...]
    state: FeedState
    remaining: int = 0


def validate_group(group: str) -> str:
    """
    Raises:
        ValueError: If ``group`` is not a known filter group
    """
    if group not in FILTER_GROUPS:
        raise ValueError(f"Unknown activity filter group: {group!r} (expected one of {', '.join(FILTER_GROUPS)})")
    return group


def distinct_authors(log: Iterable[ActivityRecord]) -> list[Author]:
    """Authors carrying both an id and a name, deduplicated by id, in first-seen order."""
    seen: dict[str, Author] = {}
    for record in log:
        if record.author_uid and record.author_name and record.author_uid not in seen:
            seen[record.author_uid] = Author(id=record.author_uid, name=record.author_name)
    return list(seen.values())


def filter_activities(
    log: Iterable[ActivityRecord],
    group: str = ALL,
    user: str | None = ALL,
) -> list[ActivityRecord]:
    """
    Subsequence of ``log`` matching both the group and the author filter.

    The two filters are independent predicates, so applying them in either
    order gives the same result.

    Raises:
        ValueError: If ``group`` is not a known filter group
    """
    allowed = FILTER_GROUPS[validate_group(group)]
    return [
        record
        for record in log
        if (allowed is None or record.type in allowed) and (user in (None, ALL) or record.author_uid == user)
    ]


def paginate(filtered: Sequence[ActivityRecord], visible_count: int) -> tuple[list[ActivityRecord], bool]:
    """
    Returns:
        (first ``visible_count`` entries, whether more exist)
    """
    visible_count = max(0, visible_count)
    return list(filtered[:visible_count]), len(filtered) > visible_count


def group_by_date_label(visible: Iterable[ActivityRecord], now: datetime) -> list[DateGroup]:
    """
    Group consecutive entries sharing a date label.

    A new group starts whenever the label changes from the previous entry,
    so concatenating the groups' items gives back the input in order.
    """
    groups: list[DateGroup] = []
    current_label: str | None = None
    current_items: list[ActivityRecord] = []

    for record in visible:
        label = date_label(record.timestamp, now)
        if label != current_label and current_items:
            groups.append(DateGroup(label=current_label or "", items=tuple(current_items)))
            current_items = []
        current_label = label
        current_items.append(record)

    if current_items:
        groups.append(DateGroup(label=current_label or "", items=tuple(current_items)))
    return groups


class ActivityFeed:
    """
    Pagination and filter state for one viewer's activity feed.

    Changing either filter resets the visible count to the page size so a
    "show more" cursor from one filtered set never carries into another.

    Example:
        feed = ActivityFeed()
        feed.set_filter_group("checklist")
        view = feed.build(project.activity_log, now)
        if view.has_more:
            feed.show_more()
    """

    def __init__(self, page_size: int = feed_config.PAGE_SIZE, page_increment: int = feed_config.PAGE_INCREMENT):
        if page_size < 1 or page_increment < 1:
            raise ValueError(f"page_size and page_increment must be positive, got {page_size}/{page_increment}")
        self.page_size = page_size
        self.page_increment = page_increment
        self.visible_count = page_size
        self.filter_group = ALL
        self.filter_user = ALL

    @classmethod
    def from_config(cls, config: SecureConfig | None = None) -> "ActivityFeed":
        settings = (config or get_config()).get_feed_config()
        return cls(page_size=settings.page_size, page_increment=settings.page_increment)

    def set_filter_group(self, group: str) -> None:
        self.filter_group = validate_group(group)
        self.visible_count = self.page_size

    def set_filter_user(self, user: str | None) -> None:
        self.filter_user = user or ALL
        self.visible_count = self.page_size

    def show_more(self) -> None:
        self.visible_count += self.page_increment

    def build(self, log: Sequence[ActivityRecord], now: datetime) -> FeedView:
        """Compute the feed view for ``log`` under the current state."""
        authors = tuple(distinct_authors(log))
        if not log:
            return FeedView(groups=(), has_more=False, authors=authors, state=FeedState.EMPTY)

        filtered = filter_activities(log, self.filter_group, self.filter_user)
        if not filtered:
            return FeedView(groups=(), has_more=False, authors=authors, state=FeedState.NO_MATCHES)

        visible, has_more = paginate(filtered, self.visible_count)
        logger.debug(
            "Built activity feed",
            extra={
                "group": self.filter_group,
                "user": self.filter_user,
                "matches": len(filtered),
                "visible": len(visible),
            },
        )
        return FeedView(
            groups=tuple(group_by_date_label(visible, now)),
            has_more=has_more,
            authors=authors,
            state=FeedState.READY,
            remaining=len(filtered) - len(visible),
        )
