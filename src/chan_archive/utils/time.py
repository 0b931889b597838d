"""Timestamp helpers for archive posts."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

ARCHIVE_TIMEZONE = ZoneInfo("America/New_York")


def original_timestamp(timestamp: int, *, archive: bool = False) -> int:
    """Return the true unix time of a stored post timestamp.

    Archive boards store the upstream board's New York wall-clock time as if
    it were UTC; those values are shifted by the New York offset in effect at
    that wall-clock time.
    """
    if not archive:
        return timestamp
    wall_clock = datetime.fromtimestamp(timestamp, tz=timezone.utc).replace(
        tzinfo=ARCHIVE_TIMEZONE
    )
    offset = wall_clock.utcoffset()
    assert offset is not None
    return timestamp - int(offset.total_seconds())


def fourchan_date(timestamp: int) -> str:
    """Format a unix timestamp the way the upstream board shows it.

    Example: ``1/5/24(Fri)13:07`` for the board's local (New York) time.
    """
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone(ARCHIVE_TIMEZONE)
    return (
        f"{moment.month}/{moment.day}/{moment:%y}({moment:%a}){moment.hour}:{moment:%M}"
    )
