"""Rolling reporting windows and their preceding comparison windows.

A window is computed from an explicit ``now`` so that every boundary used by
one request derives from the same instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Union

from dateutil.relativedelta import relativedelta

from src.clinic.core.dates import end_of_day, start_of_day
from src.clinic.core.grouping import GroupingInterval
from src.clinic.errors import InvalidTimeFrame


class TimeFrame(str, Enum):
    ONE_DAY = "1d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"


class DateUnit(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class TimeFrameConfig:
    duration: int
    unit: DateUnit
    grouping_interval: GroupingInterval
    include_today: bool = True

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError("TimeFrameConfig.duration must be positive")


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime
    previous_start: Optional[datetime] = None
    previous_end: Optional[datetime] = None

    @property
    def has_previous(self) -> bool:
        return self.previous_start is not None and self.previous_end is not None


TIME_FRAME_CONFIG: Dict[TimeFrame, TimeFrameConfig] = {
    TimeFrame.ONE_DAY: TimeFrameConfig(1, DateUnit.DAY, GroupingInterval.HOUR),
    TimeFrame.ONE_WEEK: TimeFrameConfig(7, DateUnit.DAY, GroupingInterval.DAY),
    TimeFrame.ONE_MONTH: TimeFrameConfig(1, DateUnit.MONTH, GroupingInterval.DAY),
    TimeFrame.SIX_MONTHS: TimeFrameConfig(6, DateUnit.MONTH, GroupingInterval.WEEK),
    TimeFrame.ONE_YEAR: TimeFrameConfig(1, DateUnit.YEAR, GroupingInterval.MONTH),
}

_ONE_MS = timedelta(milliseconds=1)


def parse_time_frame(token: Union[TimeFrame, str, None]) -> TimeFrame:
    """Resolve a time-frame token, raising InvalidTimeFrame when unknown."""

    if isinstance(token, TimeFrame):
        return token
    try:
        return TimeFrame(token)
    except ValueError as exc:
        raise InvalidTimeFrame(token) from exc


def get_config(time_frame: Union[TimeFrame, str]) -> TimeFrameConfig:
    return TIME_FRAME_CONFIG[parse_time_frame(time_frame)]


def get_grouping_interval(time_frame: Union[TimeFrame, str]) -> GroupingInterval:
    return get_config(time_frame).grouping_interval


def shift(value: datetime, amount: int, unit: DateUnit) -> datetime:
    """Add ``amount`` calendar units to ``value``.

    Month and year steps clamp to the last valid day of the target month
    (e.g. March 31 minus one month is the last day of February).
    """

    if unit is DateUnit.DAY:
        return value + timedelta(days=amount)
    if unit is DateUnit.MONTH:
        return value + relativedelta(months=amount)
    return value + relativedelta(years=amount)


def _window_start(now: datetime, config: TimeFrameConfig) -> datetime:
    # Day frames count today as one of their days; month/year frames subtract
    # the full duration and still end today.
    if config.unit is DateUnit.DAY:
        days = config.duration - 1 if config.include_today else config.duration
        return start_of_day(shift(now, -days, DateUnit.DAY))
    return start_of_day(shift(now, -config.duration, config.unit))


def _window_end(now: datetime, config: TimeFrameConfig) -> datetime:
    if config.include_today:
        return end_of_day(now)
    return end_of_day(shift(now, -1, DateUnit.DAY))


def previous_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Window of the same span ending one millisecond before ``start``."""

    span = end - start
    previous_end = start - _ONE_MS
    previous_start = previous_end - span
    return start_of_day(previous_start), end_of_day(previous_end)


def compute_range(time_frame: Union[TimeFrame, str], now: datetime) -> DateRange:
    """Compute the current and preceding windows for ``time_frame`` at ``now``."""

    config = get_config(time_frame)
    start = _window_start(now, config)
    end = _window_end(now, config)
    previous_start, previous_end = previous_window(start, end)
    return DateRange(start=start, end=end, previous_start=previous_start, previous_end=previous_end)
