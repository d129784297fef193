from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from src.clinic.config import settings
from src.clinic.core.time_windows import TimeFrame, parse_time_frame
from src.clinic.domain.models.stats import OverviewStats, TimeSeriesStats
from src.clinic.services.stats.service import stats_service


router = APIRouter(prefix="/stats", tags=["stats"])


def _resolve_time_frame(token: Optional[str]) -> TimeFrame:
    # An omitted token falls back to the configured default; an unknown one
    # is rejected before any repository is read.
    return parse_time_frame(token or settings.default_time_frame)


@router.get("/patients", response_model=TimeSeriesStats)
async def patients_stats(time_frame: Optional[str] = Query(None, alias="timeFrame")) -> TimeSeriesStats:
    return await stats_service.get_patients_stats(_resolve_time_frame(time_frame))


@router.get("/treatments", response_model=TimeSeriesStats)
async def treatments_stats(time_frame: Optional[str] = Query(None, alias="timeFrame")) -> TimeSeriesStats:
    return await stats_service.get_treatments_stats(_resolve_time_frame(time_frame))


@router.get("/overview", response_model=OverviewStats)
async def overview_stats(time_frame: Optional[str] = Query(None, alias="timeFrame")) -> OverviewStats:
    return await stats_service.get_overview_stats(_resolve_time_frame(time_frame))
