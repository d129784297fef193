from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from src.clinic.core.time_windows import TimeFrame


class PeriodBucket(BaseModel):
    period: str
    count: int = Field(ge=0)


class PeriodSeries(BaseModel):
    data: List[PeriodBucket] = Field(default_factory=list)
    total: int = 0


class TimeSeriesStats(BaseModel):
    time_frame: TimeFrame
    current: PeriodSeries
    previous: PeriodSeries
    # Signed percentage change of current.total against previous.total.
    change: float


class CountComparison(BaseModel):
    current: int
    previous: int
    change: float


class OverviewStats(BaseModel):
    time_frame: TimeFrame
    patients: CountComparison
    treatments: CountComparison
