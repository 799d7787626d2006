"""
Activity domain models

Represents the project activity log:
    - ActivityKind: Closed set of logged event kinds (plus UNKNOWN)
    - ActivityRecord: One immutable, time-stamped log entry
    - Author: Distinct author facet value for the feed filters

The log itself is owned by the project store. Helpers here only ever build
new collections; they never mutate the caller's log.
"""

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from pulse.domain.constants import history_retention
from pulse.utils.datetime_utils import ensure_aware, parse_iso_timestamp

# Keys of a stored activity document that are not kind-specific data
_ENVELOPE_KEYS = frozenset({"id", "type", "timestamp", "authorUid", "authorName", "authorEmail"})


class ActivityKind(str, Enum):
    """Every activity kind the product logs."""

    CHECK = "check"
    UNCHECK = "uncheck"
    NOTE = "note"
    COMMENT = "comment"
    TASK_ASSIGN = "task_assign"
    TASK_UNASSIGN = "task_unassign"
    PHASE_COMPLETE = "phase_complete"
    ANALYZE = "analyze"
    GENERATE_FIX = "generateFix"
    MONITOR = "monitor"
    COMPETITOR_ADD = "competitor_add"
    COMPETITOR_REMOVE = "competitor_remove"
    COMPETITOR_MONITOR = "competitor_monitor"
    CITATION_SHARE_CHECK = "citation_share_check"
    CONTENT_WRITE = "contentWrite"
    SCHEMA_GENERATE = "schemaGenerate"
    BRIEF_GENERATE = "briefGenerate"
    MEMBER_ADD = "member_add"
    MEMBER_REMOVE = "member_remove"
    ROLE_CHANGE = "role_change"
    SCORE_DROP = "score_drop"
    SCORE_IMPROVE = "score_improve"
    EXPORT = "export"
    CREATE_PROJECT = "create_project"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, raw_type: str | None) -> "ActivityKind":
        """Resolve a logged type string, degrading to UNKNOWN."""
        try:
            return cls(raw_type)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Author:
    """An activity author as offered in the feed's user filter."""

    id: str
    name: str


@dataclass(frozen=True)
class ActivityRecord:
    """
    One entry of a project's activity log.

    Attributes:
        id: Unique entry id
        type: Kind string exactly as logged (kept for unknown kinds)
        timestamp: When the activity happened (timezone-aware)
        author_uid: Acting user's id, if the entry was attributed
        author_name: Acting user's display name (or email)
        fields: Kind-specific data such as ``taskText``, ``url`` or ``score``

    Example:
        record = ActivityRecord(
            id="1709640000000-ab12",
            type="check",
            timestamp=datetime(2024, 3, 5, 12, 0, tzinfo=UTC),
            author_uid="u1",
            author_name="Dana",
            fields={"taskText": "Add FAQ schema"},
        )
        record.kind  # ActivityKind.CHECK
    """

    id: str
    type: str
    timestamp: datetime
    author_uid: str | None = None
    author_name: str | None = None
    fields: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise TypeError(f"timestamp must be datetime, got {type(self.timestamp)}")
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def kind(self) -> ActivityKind:
        return ActivityKind.from_type(self.type)

    @property
    def has_author(self) -> bool:
        return bool(self.author_uid or self.author_name)

    def get(self, key: str, default: Any = None) -> Any:
        """Kind-specific field, treating empty strings as missing."""
        value = self.fields.get(key)
        if value is None or value == "":
            return default
        return value

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ActivityRecord":
        """
        Build a record from a stored activity document.

        Raises:
            ValueError: If the timestamp is missing or not ISO 8601
        """
        timestamp = parse_iso_timestamp(raw.get("timestamp"))
        if timestamp is None:
            raise ValueError(f"activity {raw.get('id')!r} is missing a timestamp")

        return cls(
            id=str(raw.get("id") or ""),
            type=str(raw.get("type") or ActivityKind.UNKNOWN.value),
            timestamp=timestamp,
            author_uid=raw.get("authorUid") or None,
            author_name=raw.get("authorName") or None,
            fields={k: v for k, v in raw.items() if k not in _ENVELOPE_KEYS},
        )


def parse_activity_log(raw_log: Iterable[Mapping[str, Any]]) -> tuple[ActivityRecord, ...]:
    """Convert stored activity documents to records, preserving order."""
    return tuple(ActivityRecord.from_dict(entry) for entry in raw_log)


def create_activity(
    activity_type: str,
    now: datetime,
    data: Mapping[str, Any] | None = None,
    author: Mapping[str, Any] | None = None,
) -> ActivityRecord:
    """
    Create a new activity entry.

    Args:
        activity_type: Kind string to log
        now: Creation time
        data: Kind-specific fields
        author: Optional ``{"uid", "displayName", "email"}``; the name falls
            back to the email, then "Unknown"

    Returns:
        New ActivityRecord with a unique ``<epoch-ms>-<suffix>`` id
    """
    now = ensure_aware(now)
    author_uid = author_name = None
    if author:
        author_uid = author.get("uid")
        author_name = author.get("displayName") or author.get("email") or "Unknown"

    return ActivityRecord(
        id=f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:4]}",
        type=activity_type,
        timestamp=now,
        author_uid=author_uid,
        author_name=author_name,
        fields=dict(data or {}),
    )


def append_activity(
    existing: Sequence[ActivityRecord],
    entry: ActivityRecord,
    max_entries: int = history_retention.ACTIVITY_LOG_MAX,
) -> tuple[ActivityRecord, ...]:
    """
    Return a new log with ``entry`` first, keeping the newest ``max_entries``.

    The input sequence is left untouched.
    """
    return (entry, *existing)[:max_entries]
