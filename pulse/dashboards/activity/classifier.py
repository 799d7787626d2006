"""
Activity classification

Turns an activity record into a one-line description and a rendering hint:
- Per-kind labels with a generated fallback for kinds added later
- Author prefix resolved against the viewer ("You" / display name / "Someone")
- Kind-specific bodies with placeholder text for every missing field
- Deterministic avatar colors and initials for authors

Nothing here raises on a malformed record; every field read has a fallback.
"""

import re
from collections.abc import Callable
from enum import Enum

from pulse.domain.activity import ActivityKind, ActivityRecord

AVATAR_PALETTE: tuple[str, ...] = (
    "#FF6B35",
    "#3B82F6",
    "#10B981",
    "#8B5CF6",
    "#EC4899",
    "#F59E0B",
    "#06B6D4",
    "#EF4444",
    "#84CC16",
    "#6366F1",
)


class RenderHint(str, Enum):
    """Icon/color key for an activity row. The presentation layer owns the actual styling."""

    COMPLETED = "completed"
    REVERTED = "reverted"
    NOTE = "note"
    DISCUSSION = "discussion"
    ASSIGNMENT = "assignment"
    MILESTONE = "milestone"
    ANALYSIS = "analysis"
    MONITORING = "monitoring"
    COMPETITOR = "competitor"
    REMOVAL = "removal"
    CONTENT = "content"
    TEAM = "team"
    ALERT_UP = "alert_up"
    ALERT_DOWN = "alert_down"
    EXPORT = "export"
    PROJECT = "project"
    GENERIC = "generic"


LABELS: dict[ActivityKind, str] = {
    ActivityKind.CHECK: "Completed",
    ActivityKind.UNCHECK: "Unchecked",
    ActivityKind.NOTE: "Added note to",
    ActivityKind.COMMENT: "Commented on",
    ActivityKind.TASK_ASSIGN: "Assigned task",
    ActivityKind.TASK_UNASSIGN: "Unassigned task",
    ActivityKind.PHASE_COMPLETE: "Completed phase",
    ActivityKind.ANALYZE: "Analyzed",
    ActivityKind.GENERATE_FIX: "Generated fix for",
    ActivityKind.MONITOR: "Ran monitor",
    ActivityKind.COMPETITOR_ADD: "Added competitor",
    ActivityKind.COMPETITOR_REMOVE: "Removed competitor",
    ActivityKind.COMPETITOR_MONITOR: "Checked competitors",
    ActivityKind.CITATION_SHARE_CHECK: "Checked citation share",
    ActivityKind.CONTENT_WRITE: "Generated content",
    ActivityKind.SCHEMA_GENERATE: "Generated schema",
    ActivityKind.BRIEF_GENERATE: "Generated content brief",
    ActivityKind.MEMBER_ADD: "Added team member",
    ActivityKind.MEMBER_REMOVE: "Removed member",
    ActivityKind.ROLE_CHANGE: "Changed role",
    ActivityKind.SCORE_DROP: "Score dropped",
    ActivityKind.SCORE_IMPROVE: "Score improved",
    ActivityKind.EXPORT: "Exported report",
    ActivityKind.CREATE_PROJECT: "Created project",
}

_HINTS: dict[ActivityKind, RenderHint] = {
    ActivityKind.CHECK: RenderHint.COMPLETED,
    ActivityKind.UNCHECK: RenderHint.REVERTED,
    ActivityKind.NOTE: RenderHint.NOTE,
    ActivityKind.COMMENT: RenderHint.DISCUSSION,
    ActivityKind.TASK_ASSIGN: RenderHint.ASSIGNMENT,
    ActivityKind.TASK_UNASSIGN: RenderHint.ASSIGNMENT,
    ActivityKind.PHASE_COMPLETE: RenderHint.MILESTONE,
    ActivityKind.ANALYZE: RenderHint.ANALYSIS,
    ActivityKind.GENERATE_FIX: RenderHint.ANALYSIS,
    ActivityKind.MONITOR: RenderHint.MONITORING,
    ActivityKind.COMPETITOR_ADD: RenderHint.COMPETITOR,
    ActivityKind.COMPETITOR_REMOVE: RenderHint.REMOVAL,
    ActivityKind.COMPETITOR_MONITOR: RenderHint.COMPETITOR,
    ActivityKind.CITATION_SHARE_CHECK: RenderHint.COMPETITOR,
    ActivityKind.CONTENT_WRITE: RenderHint.CONTENT,
    ActivityKind.SCHEMA_GENERATE: RenderHint.CONTENT,
    ActivityKind.BRIEF_GENERATE: RenderHint.CONTENT,
    ActivityKind.MEMBER_ADD: RenderHint.TEAM,
    ActivityKind.MEMBER_REMOVE: RenderHint.REMOVAL,
    ActivityKind.ROLE_CHANGE: RenderHint.TEAM,
    ActivityKind.SCORE_DROP: RenderHint.ALERT_DOWN,
    ActivityKind.SCORE_IMPROVE: RenderHint.ALERT_UP,
    ActivityKind.EXPORT: RenderHint.EXPORT,
    ActivityKind.CREATE_PROJECT: RenderHint.PROJECT,
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def rendering_hint(kind: ActivityKind) -> RenderHint:
    return _HINTS.get(kind, RenderHint.GENERIC)


def generated_label(raw_type: str | None) -> str:
    """
    Readable label for a kind the label table does not know.

    Examples:
        >>> generated_label("some_new_type")
        'Some new type'
        >>> generated_label("calendarPublish")
        'Calendar publish'
    """
    words = _CAMEL_BOUNDARY.sub(" ", raw_type or "").replace("_", " ").replace("-", " ").split()
    if not words:
        return "Activity"
    text = " ".join(words).lower()
    return text[0].upper() + text[1:]


def label_for(record: ActivityRecord) -> str:
    return LABELS.get(record.kind) or generated_label(record.type)


def author_prefix(record: ActivityRecord, viewer_uid: str | None) -> str | None:
    """
    "You" for the viewer's own activity, else the author's name, else "Someone".

    Returns None when the record carries no author fields at all.
    """
    if record.author_uid and viewer_uid and record.author_uid == viewer_uid:
        return "You"
    if record.author_name:
        return record.author_name
    if record.author_uid:
        return "Someone"
    return None


def _task(record: ActivityRecord) -> str:
    return str(record.get("taskText", "task"))


def _member(record: ActivityRecord) -> str:
    return str(record.get("memberName") or record.get("memberEmail") or "member")


def _competitor(record: ActivityRecord) -> str:
    return str(record.get("url") or record.get("name") or "competitor")


def _body_task(label: str, record: ActivityRecord) -> str:
    return f"{label}: {_task(record)}"


def _body_assign(label: str, record: ActivityRecord) -> str:
    joiner = "to" if record.kind == ActivityKind.TASK_ASSIGN else "from"
    return f"{label}: {_task(record)} {joiner} {record.get('assigneeName', 'member')}"


def _body_fix(label: str, record: ActivityRecord) -> str:
    return f"{label}: {record.get('taskText') or record.get('pageUrl') or 'item'}"


def _body_phase(label: str, record: ActivityRecord) -> str:
    title = record.get("phaseTitle")
    number = record.get("phase")
    if title is None and number is not None:
        title = f"Phase {number}"
    return f"{label}: {title or 'item'}"


def _body_analyze(label: str, record: ActivityRecord) -> str:
    text = f"{label} {record.get('url', 'site')}"
    score = record.get("score")
    return f"{text} - Score: {score}" if score is not None else text


def _body_monitor(label: str, record: ActivityRecord) -> str:
    checked = record.get("queriesChecked")
    if checked is None:
        return label
    return f"{label}: {record.get('queriesCited', 0)}/{checked} queries cited"


def _body_competitor(label: str, record: ActivityRecord) -> str:
    return f"{label}: {_competitor(record)}"


def _body_content(label: str, record: ActivityRecord) -> str:
    return f"{label}: {record.get('topic') or record.get('title') or 'content'}"


def _body_schema(label: str, record: ActivityRecord) -> str:
    return f"{label}: {record.get('schemaType') or record.get('topic') or 'schema'}"


def _body_member(label: str, record: ActivityRecord) -> str:
    return f"{label}: {_member(record)}"


def _body_role(label: str, record: ActivityRecord) -> str:
    return f"{label}: {_member(record)} to {record.get('newRole', 'role')}"


def _body_score(label: str, record: ActivityRecord) -> str:
    delta = record.get("delta")
    if delta is None:
        return label
    return f"{label} {abs(delta) if isinstance(delta, int | float) else delta} points"


def _body_label(label: str, record: ActivityRecord) -> str:
    return label


_BODIES: dict[ActivityKind, Callable[[str, ActivityRecord], str]] = {
    ActivityKind.CHECK: _body_task,
    ActivityKind.UNCHECK: _body_task,
    ActivityKind.NOTE: _body_task,
    ActivityKind.COMMENT: _body_task,
    ActivityKind.TASK_ASSIGN: _body_assign,
    ActivityKind.TASK_UNASSIGN: _body_assign,
    ActivityKind.PHASE_COMPLETE: _body_phase,
    ActivityKind.ANALYZE: _body_analyze,
    ActivityKind.GENERATE_FIX: _body_fix,
    ActivityKind.MONITOR: _body_monitor,
    ActivityKind.COMPETITOR_ADD: _body_competitor,
    ActivityKind.COMPETITOR_REMOVE: _body_competitor,
    ActivityKind.CONTENT_WRITE: _body_content,
    ActivityKind.BRIEF_GENERATE: _body_content,
    ActivityKind.SCHEMA_GENERATE: _body_schema,
    ActivityKind.MEMBER_ADD: _body_member,
    ActivityKind.MEMBER_REMOVE: _body_member,
    ActivityKind.ROLE_CHANGE: _body_role,
    ActivityKind.SCORE_DROP: _body_score,
    ActivityKind.SCORE_IMPROVE: _body_score,
}


def describe(record: ActivityRecord, viewer_uid: str | None = None) -> str:
    """
    One-line description of an activity.

    Args:
        record: Activity to describe
        viewer_uid: Id of the user looking at the feed

    Returns:
        Author prefix (when the record has author fields) followed by the
        kind's label and body, e.g. "You completed: Add FAQ schema".
        Unknown kinds read as prefix plus generated label.

    Example:
        describe(record, viewer_uid="u1")  # "Dana added competitor: rival.com"
    """
    body = _BODIES.get(record.kind, _body_label)(label_for(record), record)
    prefix = author_prefix(record, viewer_uid)
    if prefix is None:
        return body
    return f"{prefix} {body[0].lower()}{body[1:]}"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def avatar_color_index(author_id: str | None) -> int:
    """
    Palette index for an author, stable across calls and processes.

    Uses the 32-bit ``hash * 31 + code unit`` string hash over UTF-16 code
    units that the web client uses, so both sides pick the same color.
    """
    if not author_id:
        return 0
    encoded = author_id.encode("utf-16-le")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = code_unit + (_to_int32(_to_int32(value) << 5) - value)
    return abs(value) % len(AVATAR_PALETTE)


def avatar_color(author_id: str | None) -> str:
    return AVATAR_PALETTE[avatar_color_index(author_id)]


def initials(name: str | None) -> str:
    """
    Examples:
        >>> initials("Dana Scully")
        'DS'
        >>> initials("")
        '?'
    """
    parts = (name or "").split()
    if not parts:
        return "?"
    if len(parts) >= 2:
        return (parts[0][0] + parts[-1][0]).upper()
    return parts[0][0].upper()
