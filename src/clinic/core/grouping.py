from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum


class GroupingInterval(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def week_start(value: datetime) -> datetime:
    """Monday of the ISO week containing ``value`` (Sunday maps back six days)."""

    return value - timedelta(days=value.weekday())


def format_bucket_label(value: datetime, interval: GroupingInterval) -> str:
    """Return the canonical bucket label for ``value`` at ``interval``.

    Labels are zero-padded so that lexicographic order matches chronological
    order within a single interval type:

    - hour:  ``YYYY-MM-DD HH:00``
    - day:   ``YYYY-MM-DD``
    - week:  ``YYYY-MM-DD`` of the Monday starting the week
    - month: ``YYYY-MM``
    """

    interval = GroupingInterval(interval)
    if interval is GroupingInterval.HOUR:
        return f"{_day_label(value)} {value.hour:02d}:00"
    if interval is GroupingInterval.DAY:
        return _day_label(value)
    if interval is GroupingInterval.WEEK:
        return _day_label(week_start(value))
    return f"{value.year:04d}-{value.month:02d}"


def _day_label(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
