from datetime import datetime, timedelta

import pytest

from src.clinic.core.grouping import GroupingInterval
from src.clinic.core.time_windows import (
    TIME_FRAME_CONFIG,
    DateUnit,
    TimeFrame,
    TimeFrameConfig,
    compute_range,
    get_config,
    get_grouping_interval,
    parse_time_frame,
    shift,
)
from src.clinic.errors import InvalidTimeFrame


def test_one_day_window_and_previous_day():
    date_range = compute_range("1d", datetime(2024, 6, 15, 10, 0, 0))

    assert date_range.start == datetime(2024, 6, 15, 0, 0, 0)
    assert date_range.end == datetime(2024, 6, 15, 23, 59, 59, 999000)
    assert date_range.previous_start == datetime(2024, 6, 14, 0, 0, 0)
    assert date_range.previous_end == datetime(2024, 6, 14, 23, 59, 59, 999000)


def test_one_week_window_counts_today_as_one_of_seven_days():
    # 2024-06-15 is a Saturday.
    date_range = compute_range(TimeFrame.ONE_WEEK, datetime(2024, 6, 15))

    assert date_range.start == datetime(2024, 6, 9)
    assert date_range.end == datetime(2024, 6, 15, 23, 59, 59, 999000)
    assert date_range.previous_start == datetime(2024, 6, 2)
    assert date_range.previous_end == datetime(2024, 6, 8, 23, 59, 59, 999000)
    assert get_grouping_interval("1w") is GroupingInterval.DAY

    days = {(date_range.start + timedelta(days=offset)).date() for offset in range(7)}
    assert len(days) == 7
    assert max(days) == date_range.end.date()


def test_one_month_window_subtracts_full_calendar_month():
    date_range = compute_range("1m", datetime(2024, 6, 15, 8, 30))

    assert date_range.start == datetime(2024, 5, 15)
    assert date_range.end == datetime(2024, 6, 15, 23, 59, 59, 999000)


def test_month_subtraction_clamps_to_end_of_february():
    date_range = compute_range("1m", datetime(2024, 3, 31, 12, 0))
    assert date_range.start == datetime(2024, 2, 29)

    date_range = compute_range("1m", datetime(2023, 3, 31, 12, 0))
    assert date_range.start == datetime(2023, 2, 28)


def test_six_month_and_year_windows():
    six_months = compute_range("6m", datetime(2024, 8, 31, 9, 0))
    assert six_months.start == datetime(2024, 2, 29)
    assert get_grouping_interval("6m") is GroupingInterval.WEEK

    year = compute_range("1y", datetime(2024, 2, 29, 9, 0))
    assert year.start == datetime(2023, 2, 28)
    assert get_grouping_interval("1y") is GroupingInterval.MONTH


@pytest.mark.parametrize("time_frame", list(TimeFrame))
def test_previous_window_never_overlaps_and_matches_span(time_frame):
    now = datetime(2024, 6, 15, 13, 45, 12)
    date_range = compute_range(time_frame, now)

    assert date_range.start <= date_range.end
    assert date_range.previous_end < date_range.start
    assert date_range.start - date_range.previous_end == timedelta(milliseconds=1)

    current_days = (date_range.end.date() - date_range.start.date()).days
    previous_days = (date_range.previous_end.date() - date_range.previous_start.date()).days
    assert current_days == previous_days


def test_exclude_today_shifts_the_window_back_one_day(monkeypatch):
    from src.clinic.core import time_windows

    config = TimeFrameConfig(7, DateUnit.DAY, GroupingInterval.DAY, include_today=False)
    monkeypatch.setitem(time_windows.TIME_FRAME_CONFIG, TimeFrame.ONE_WEEK, config)

    date_range = compute_range("1w", datetime(2024, 6, 15, 10, 0))
    assert date_range.start == datetime(2024, 6, 8)
    assert date_range.end == datetime(2024, 6, 14, 23, 59, 59, 999000)


def test_unknown_time_frame_is_rejected():
    with pytest.raises(InvalidTimeFrame):
        compute_range("2w", datetime(2024, 6, 15))
    with pytest.raises(InvalidTimeFrame):
        parse_time_frame(None)
    with pytest.raises(InvalidTimeFrame):
        get_config("3m")


def test_config_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        TimeFrameConfig(0, DateUnit.DAY, GroupingInterval.DAY)


def test_every_time_frame_has_a_config():
    assert set(TIME_FRAME_CONFIG) == set(TimeFrame)


def test_shift_by_year_from_leap_day():
    assert shift(datetime(2024, 2, 29), -1, DateUnit.YEAR) == datetime(2023, 2, 28)
