"""Relative time formatting utilities."""

from datetime import datetime, timezone
from typing import Optional

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
MONTH = 30 * DAY
YEAR = 365 * DAY


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def format_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Humanize a past timestamp in its coarsest unit.

    Args:
        timestamp: Timezone-aware datetime, or None
        now: Reference time (defaults to the current time)

    Returns:
        "never" for None, "just now" under a minute (or in the future),
        otherwise "<n>m ago", "<n>h ago", "<n>d ago", "<n>mo ago" or "<n>y ago"

    Example:
        A timestamp 90 minutes ago gives "1h ago"
    """
    if timestamp is None:
        return "never"

    seconds = int((_now(now) - timestamp).total_seconds())
    if seconds < MINUTE:
        return "just now"

    for unit_seconds, suffix in ((YEAR, "y"), (MONTH, "mo"), (DAY, "d"), (HOUR, "h")):
        if seconds >= unit_seconds:
            return f"{seconds // unit_seconds}{suffix} ago"
    return f"{seconds // MINUTE}m ago"


def format_duration(started_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format time elapsed since started_at as an uptime.

    Args:
        started_at: Start time, or None if unknown
        now: Reference time (defaults to the current time)

    Returns:
        "45s", "12m", "2h 5m", "3d 4h", or "?" when the start is unknown
    """
    if started_at is None:
        return "?"

    seconds = max(0, int((_now(now) - started_at).total_seconds()))
    if seconds < MINUTE:
        return f"{seconds}s"
    if seconds < HOUR:
        return f"{seconds // MINUTE}m"
    if seconds < DAY:
        return f"{seconds // HOUR}h {(seconds % HOUR) // MINUTE}m"
    return f"{seconds // DAY}d {(seconds % DAY) // HOUR}h"
