"""Date normalization helpers shared by the stats engine and the CRUD layer.

Every instant handled here is a *naive local* ``datetime``. Timezone-aware
inputs are converted to local wall-clock time first so that they compare
cleanly against window boundaries computed from a naive ``now``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional, Union

from dateutil import parser as date_parser

DateValue = Union[datetime, date, str, None]

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def start_of_day(value: datetime) -> datetime:
    """Return ``value`` with its time set to 00:00:00.000."""

    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    """Return ``value`` with its time set to 23:59:59.999."""

    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def normalize_date(value: DateValue) -> Optional[datetime]:
    """Convert a stored date representation into a local naive datetime.

    - ``None`` or an empty string yields ``None``.
    - A ``datetime`` is returned as the same instant (aware values are moved
      to local time).
    - A ``date`` or a strict ``YYYY-MM-DD`` string yields local midnight of
      that calendar day, never midnight UTC.
    - Any other string is parsed; unparseable input, or input missing the
      year, month or day, yields ``None`` so the caller can skip the record.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if _DATE_ONLY_RE.match(text):
        try:
            return datetime.combine(date.fromisoformat(text), time.min)
        except ValueError:
            return None

    # dateutil fills missing fields from its default; parsing against two
    # different defaults exposes strings without a full calendar date.
    try:
        parsed = date_parser.parse(text, default=_DEFAULT_A)
        if parsed != date_parser.parse(text, default=_DEFAULT_B):
            return None
    except (ValueError, OverflowError):
        return None
    return to_local_naive(parsed)


def is_date_in_range(value: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive calendar-day membership test.

    The comparison is by day: ``value`` is floored to its start of day and
    checked against start-of-day(``start``) and end-of-day(``end``).
    """

    day = start_of_day(value)
    return start_of_day(start) <= day <= end_of_day(end)
