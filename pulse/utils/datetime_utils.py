#!/usr/bin/env python3
"""
Datetime Utility Functions

Time bucketing helpers shared by the activity feed and the trends calculator:
- ISO timestamps as written by the project store ('Z' suffix)
- Calendar-day labels ("Today", "Yesterday", "Mar 5")
- Relative time ("Just now", "5 minutes ago", "3 days ago")
- Sunday-starting week buckets for velocity aggregation

Every function that depends on the current time takes ``now`` explicitly.
Naive datetimes are treated as UTC.
"""

from datetime import UTC, date, datetime, timedelta, tzinfo

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
RELATIVE_TIME_MAX_DAYS = 7


def parse_iso_timestamp(timestamp_str: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp (with or without 'Z' suffix).

    Handles:
    - "2026-02-10T10:00:00Z" (UTC with Z)
    - "2026-02-10T10:00:00.123Z" (JavaScript toISOString output)
    - "2026-02-10T10:00:00+00:00" (explicit offset)
    - "2026-02-10" (date only)

    Args:
        timestamp_str: ISO 8601 timestamp string, or None

    Returns:
        Timezone-aware datetime (naive input is assumed UTC), or None if input is empty

    Raises:
        ValueError: If timestamp format is invalid

    Examples:
        >>> parse_iso_timestamp("2026-02-10T10:00:00Z")
        datetime.datetime(2026, 2, 10, 10, 0, tzinfo=datetime.timezone.utc)

        >>> parse_iso_timestamp(None)
    """
    if not timestamp_str:
        return None

    if not isinstance(timestamp_str, str):
        raise ValueError(f"Timestamp must be a string, got {type(timestamp_str)}")

    try:
        if timestamp_str.endswith("Z"):
            parsed = datetime.fromisoformat(timestamp_str[:-1] + "+00:00")
        else:
            parsed = datetime.fromisoformat(timestamp_str)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid ISO timestamp format: {timestamp_str}") from e

    return ensure_aware(parsed)


def ensure_aware(value: datetime) -> datetime:
    """Return ``value`` with UTC attached if it is naive."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _in_zone_of(timestamp: datetime, now: datetime) -> datetime:
    """Express ``timestamp`` in the timezone of ``now``."""
    return ensure_aware(timestamp).astimezone(ensure_aware(now).tzinfo)


def short_date(value: datetime | date) -> str:
    """
    Format a short month/day label.

    Examples:
        >>> short_date(datetime(2026, 3, 5))
        'Mar 5'
    """
    return f"{value:%b} {value.day}"


def date_label(timestamp: datetime, now: datetime) -> str:
    """
    Label a timestamp by calendar day relative to ``now``.

    Compares calendar dates in ``now``'s timezone rather than elapsed
    milliseconds, so 23:00 yesterday and 00:30 today land in different
    buckets even though they are only 90 minutes apart.

    Args:
        timestamp: When the event happened
        now: Reference time (its timezone defines the calendar)

    Returns:
        "Today", "Yesterday", or a short date such as "Mar 5"
    """
    local_ts = _in_zone_of(timestamp, now)
    diff_days = (ensure_aware(now).date() - local_ts.date()).days

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    return short_date(local_ts)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def relative_time(timestamp: datetime, now: datetime) -> str:
    """
    Describe how long ago ``timestamp`` was.

    Thresholds (floor division):
        < 1 minute  -> "Just now"
        < 60 minutes -> "N minutes ago"
        < 24 hours  -> "N hours ago"
        < 7 days    -> "N days ago"
        otherwise   -> short date

    Timestamps in the future (clock skew between writers) read "Just now".

    Examples:
        >>> now = datetime(2026, 3, 5, 12, 0, tzinfo=UTC)
        >>> relative_time(now - timedelta(seconds=90), now)
        '1 minute ago'
    """
    local_ts = _in_zone_of(timestamp, now)
    elapsed = (ensure_aware(now) - local_ts).total_seconds()

    minutes = int(elapsed // SECONDS_PER_MINUTE)
    hours = int(elapsed // SECONDS_PER_HOUR)
    days = int(elapsed // SECONDS_PER_DAY)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < RELATIVE_TIME_MAX_DAYS:
        return _plural(days, "day")
    return short_date(local_ts)


def week_bucket_key(timestamp: datetime, tz: tzinfo | None = None) -> date:
    """
    Return the Sunday that starts the week containing ``timestamp``.

    Args:
        timestamp: Event time
        tz: Calendar timezone (default: the timestamp's own timezone)

    Examples:
        >>> week_bucket_key(datetime(2026, 3, 4, 9, 0))  # Wednesday
        datetime.date(2026, 3, 1)
    """
    local_ts = ensure_aware(timestamp)
    if tz is not None:
        local_ts = local_ts.astimezone(tz)
    day = local_ts.date()
    # date.weekday(): Monday=0 ... Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_bucket_label(week_start: date) -> str:
    """Display label for a week bucket ("Mar 1")."""
    return short_date(week_start)


def days_between(start: datetime, now: datetime) -> float:
    """Fractional days from ``start`` to ``now`` (negative if ``start`` is later)."""
    return (ensure_aware(now) - ensure_aware(start)).total_seconds() / SECONDS_PER_DAY
