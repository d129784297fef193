"""Period-over-period statistics for patients and treatments.

The pure functions in this module take the raw records plus an explicit
``now`` and never touch a repository; :class:`StatsService` does the fetching
and then delegates to them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from starlette.concurrency import run_in_threadpool

from src.clinic.core.dates import DateValue, is_date_in_range, normalize_date
from src.clinic.core.grouping import GroupingInterval, format_bucket_label
from src.clinic.core.time_windows import DateRange, TimeFrame, compute_range, get_grouping_interval, parse_time_frame
from src.clinic.domain.models.stats import CountComparison, OverviewStats, PeriodBucket, PeriodSeries, TimeSeriesStats
from src.clinic.errors import DataSourceUnavailable
from src.clinic.infra.db import inmemory as repos
from src.clinic.infra.db.repositories import PatientRepository, TreatmentRepository

logger = logging.getLogger("stats")

PATIENT_DATE_FIELD = "created_at"
TREATMENT_DATE_FIELD = "date"


def read_date(record: Any, date_field: str) -> DateValue:
    if isinstance(record, Mapping):
        return record.get(date_field)
    return getattr(record, date_field, None)


def round_change(value: float) -> float:
    """Round to two decimals, halves away from zero."""

    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percentage_change(current: int, previous: int) -> float:
    if previous > 0:
        change = (current - previous) / previous * 100
    else:
        change = 100 if current > 0 else 0
    return round_change(change)


def _in_window(value: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    if value is None or start is None or end is None:
        return False
    return is_date_in_range(value, start, end)


def partition_by_range(
    records: Iterable[Any],
    date_field: str,
    date_range: DateRange,
) -> Tuple[List[Any], List[Any]]:
    """Split records into (current, previous) by calendar-day membership.

    Records whose date is missing or unparseable land in neither list.
    """

    current: List[Any] = []
    previous: List[Any] = []
    for record in records:
        value = normalize_date(read_date(record, date_field))
        if value is None:
            continue
        if _in_window(value, date_range.start, date_range.end):
            current.append(record)
        elif _in_window(value, date_range.previous_start, date_range.previous_end):
            previous.append(record)
    return current, previous


def group_by_interval(records: Iterable[Any], date_field: str, interval: GroupingInterval) -> Dict[str, int]:
    grouped: Dict[str, int] = {}
    for record in records:
        value = normalize_date(read_date(record, date_field))
        if value is None:
            continue
        label = format_bucket_label(value, interval)
        grouped[label] = grouped.get(label, 0) + 1
    return grouped


def to_period_buckets(grouped: Dict[str, int]) -> List[PeriodBucket]:
    return [PeriodBucket(period=period, count=count) for period, count in sorted(grouped.items())]


def aggregate(
    records: Sequence[Any],
    date_field: str,
    time_frame: Union[TimeFrame, str],
    now: datetime,
) -> TimeSeriesStats:
    """Bucketed current/previous counts for ``records`` over ``time_frame``."""

    time_frame = parse_time_frame(time_frame)
    date_range = compute_range(time_frame, now)
    interval = get_grouping_interval(time_frame)

    current, previous = partition_by_range(records, date_field, date_range)
    logger.debug(
        "stats %s on %s: window %s..%s, previous %s..%s, current=%d previous=%d",
        time_frame.value,
        date_field,
        date_range.start,
        date_range.end,
        date_range.previous_start,
        date_range.previous_end,
        len(current),
        len(previous),
    )

    return TimeSeriesStats(
        time_frame=time_frame,
        current=PeriodSeries(
            data=to_period_buckets(group_by_interval(current, date_field, interval)),
            total=len(current),
        ),
        previous=PeriodSeries(
            data=to_period_buckets(group_by_interval(previous, date_field, interval)),
            total=len(previous),
        ),
        change=percentage_change(len(current), len(previous)),
    )


def compare_counts(records: Iterable[Any], date_field: str, date_range: DateRange) -> CountComparison:
    current, previous = partition_by_range(records, date_field, date_range)
    return CountComparison(
        current=len(current),
        previous=len(previous),
        change=percentage_change(len(current), len(previous)),
    )


class StatsService:
    """Fetches records from the repositories and aggregates them.

    Repositories default to the module-level singletons in
    ``infra.db.inmemory`` (which may have been swapped for SQL-backed ones at
    startup) and are resolved on every call.
    """

    def __init__(
        self,
        patients: Optional[PatientRepository] = None,
        treatments: Optional[TreatmentRepository] = None,
    ) -> None:
        self._patients = patients
        self._treatments = treatments

    def _patient_repository(self) -> PatientRepository:
        repository = self._patients or repos.patient_repository
        if repository is None:
            raise DataSourceUnavailable("Database not initialized")
        return repository

    def _treatment_repository(self) -> TreatmentRepository:
        repository = self._treatments or repos.treatment_repository
        if repository is None:
            raise DataSourceUnavailable("Database not initialized")
        return repository

    async def _fetch_patients(self) -> List[Any]:
        return await run_in_threadpool(self._patient_repository().find)

    async def _fetch_treatments(self) -> List[Any]:
        return await run_in_threadpool(self._treatment_repository().find)

    async def get_patients_stats(
        self, time_frame: Union[TimeFrame, str], now: Optional[datetime] = None
    ) -> TimeSeriesStats:
        time_frame = parse_time_frame(time_frame)
        now = now or datetime.now()
        patients = await self._fetch_patients()
        return aggregate(patients, PATIENT_DATE_FIELD, time_frame, now)

    async def get_treatments_stats(
        self, time_frame: Union[TimeFrame, str], now: Optional[datetime] = None
    ) -> TimeSeriesStats:
        time_frame = parse_time_frame(time_frame)
        now = now or datetime.now()
        treatments = await self._fetch_treatments()
        return aggregate(treatments, TREATMENT_DATE_FIELD, time_frame, now)

    async def get_overview_stats(
        self, time_frame: Union[TimeFrame, str], now: Optional[datetime] = None
    ) -> OverviewStats:
        time_frame = parse_time_frame(time_frame)
        now = now or datetime.now()
        date_range = compute_range(time_frame, now)

        patients, treatments = await asyncio.gather(self._fetch_patients(), self._fetch_treatments())

        return OverviewStats(
            time_frame=time_frame,
            patients=compare_counts(patients, PATIENT_DATE_FIELD, date_range),
            treatments=compare_counts(treatments, TREATMENT_DATE_FIELD, date_range),
        )


stats_service = StatsService()
