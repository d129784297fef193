from datetime import datetime

import pytest

from src.clinic.core.grouping import GroupingInterval
from src.clinic.core.time_windows import compute_range
from src.clinic.domain.models.patient import Patient
from src.clinic.domain.models.treatment import Treatment
from src.clinic.errors import DataSourceUnavailable, InvalidTimeFrame
from src.clinic.infra.db import inmemory as repos
from src.clinic.infra.db.repositories import TreatmentRepository
from src.clinic.services.stats.service import (
    StatsService,
    aggregate,
    group_by_interval,
    partition_by_range,
    percentage_change,
    round_change,
    to_period_buckets,
)

NOW = datetime(2024, 6, 15, 10, 0)


def _patient(patient_id, created_at):
    return Patient(
        id=patient_id,
        name="Ada",
        surname="Rossi",
        email=f"p{patient_id}@example.com",
        phone_number="000",
        fiscal_code=f"FC{patient_id}",
        created_at=created_at,
    )


def _treatment(treatment_id, date):
    return Treatment(id=treatment_id, patient_id=1, date=date, content="check-up")


def test_group_by_day_mixes_date_only_and_datetime_strings():
    records = [{"date": "2024-06-10"}, {"date": "2024-06-10T23:00:00"}, {"date": "2024-06-11"}]

    grouped = group_by_interval(records, "date", GroupingInterval.DAY)

    assert grouped == {"2024-06-10": 2, "2024-06-11": 1}
    assert [bucket.model_dump() for bucket in to_period_buckets(grouped)] == [
        {"period": "2024-06-10", "count": 2},
        {"period": "2024-06-11", "count": 1},
    ]


@pytest.mark.parametrize(
    "current, previous, expected",
    [(10, 0, 100), (0, 0, 0), (5, 10, -50.0), (3, 3, 0), (2, 3, -33.33), (1, 3, -66.67)],
)
def test_percentage_change(current, previous, expected):
    assert percentage_change(current, previous) == expected


def test_rounding_is_half_away_from_zero():
    assert round_change(1.005) == 1.01
    assert round_change(-1.005) == -1.01
    assert round_change(12.344) == 12.34


def test_partition_skips_missing_and_unparseable_dates():
    date_range = compute_range("1w", NOW)
    records = [
        {"date": "2024-06-15"},
        {"date": "2024-06-09T00:00:00"},
        {"date": "2024-06-08"},
        {"date": "2024-06-02"},
        {"date": "2024-06-01"},
        {"date": None},
        {"date": "garbage"},
        {},
    ]

    current, previous = partition_by_range(records, "date", date_range)

    assert [r["date"] for r in current] == ["2024-06-15", "2024-06-09T00:00:00"]
    assert [r["date"] for r in previous] == ["2024-06-08", "2024-06-02"]


def test_aggregate_treatments_by_week():
    treatments = [
        _treatment(1, "2024-06-15"),
        _treatment(2, "2024-06-10T09:00:00"),
        _treatment(3, datetime(2024, 6, 3, 12, 0)),
        _treatment(4, "2023-11-01"),
    ]

    stats = aggregate(treatments, "date", "6m", NOW)

    assert stats.time_frame.value == "6m"
    assert stats.current.total == 3
    assert [(b.period, b.count) for b in stats.current.data] == [("2024-06-03", 1), ("2024-06-10", 2)]
    assert stats.previous.total == 1
    assert [(b.period, b.count) for b in stats.previous.data] == [("2023-10-30", 1)]
    assert stats.change == 200.0


def test_aggregate_empty_records():
    stats = aggregate([], "created_at", "1m", NOW)

    assert stats.current.total == 0
    assert stats.previous.total == 0
    assert stats.current.data == []
    assert stats.change == 0


def test_aggregate_rejects_unknown_time_frame():
    with pytest.raises(InvalidTimeFrame):
        aggregate([], "date", "3d", NOW)


async def test_patients_stats_groups_by_hour_for_one_day():
    repos.patient_repository.save(_patient(1, datetime(2024, 6, 15, 9, 12)))
    repos.patient_repository.save(_patient(2, datetime(2024, 6, 15, 9, 50)))
    repos.patient_repository.save(_patient(3, datetime(2024, 6, 14, 17, 0)))

    stats = await StatsService().get_patients_stats("1d", now=NOW)

    assert [(b.period, b.count) for b in stats.current.data] == [("2024-06-15 09:00", 2)]
    assert [(b.period, b.count) for b in stats.previous.data] == [("2024-06-14 17:00", 1)]
    assert stats.change == 100.0


async def test_overview_counts_patients_and_treatments():
    repos.patient_repository.save(_patient(1, datetime(2024, 6, 12, 8, 0)))
    repos.patient_repository.save(_patient(2, datetime(2024, 6, 5, 8, 0)))
    repos.patient_repository.save(_patient(3, datetime(2024, 6, 4, 8, 0)))
    repos.treatment_repository.save(_treatment(1, "2024-06-14"))
    repos.treatment_repository.save(_treatment(2, "unknown"))

    overview = await StatsService().get_overview_stats("1w", now=NOW)

    assert overview.patients.model_dump() == {"current": 1, "previous": 2, "change": -50.0}
    assert overview.treatments.model_dump() == {"current": 1, "previous": 0, "change": 100.0}


class _UnreachableTreatments(TreatmentRepository):
    def __init__(self):
        self.calls = 0

    def get(self, treatment_id):
        raise NotImplementedError

    def find(self, *, patient_id=None):
        self.calls += 1
        raise DataSourceUnavailable("Database unavailable")

    def save(self, treatment):
        raise NotImplementedError

    def delete(self, treatment_id):
        raise NotImplementedError


async def test_unreachable_store_surfaces_data_source_error():
    service = StatsService(treatments=_UnreachableTreatments())

    with pytest.raises(DataSourceUnavailable):
        await service.get_treatments_stats("1m", now=NOW)


async def test_invalid_time_frame_is_rejected_before_fetching():
    treatments = _UnreachableTreatments()
    service = StatsService(treatments=treatments)

    with pytest.raises(InvalidTimeFrame):
        await service.get_treatments_stats("bogus", now=NOW)
    assert treatments.calls == 0


async def test_uninitialized_store(monkeypatch):
    monkeypatch.setattr(repos, "patient_repository", None)

    with pytest.raises(DataSourceUnavailable):
        await StatsService().get_patients_stats("1w", now=NOW)
