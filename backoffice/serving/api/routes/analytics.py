"""
Analytics API Endpoints

Visitor statistics for the admin dashboard. Reads are cached per filter
set; tracking writes invalidate the namespace.
"""

from datetime import date
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backoffice.analytics.aggregation import GROUP_BY_OPTIONS
from backoffice.analytics.metrics import derive_metrics
from backoffice.analytics.models import (
    AnalyticsSnapshot,
    ComparisonResult,
    DateRange,
    DerivedMetric,
    PageStat,
    TrafficSource,
    VisitorStatRow,
)
from backoffice.analytics.periods import date_range_presets, default_period
from backoffice.config import get_settings
from backoffice.errors import EntityValidationError
from backoffice.serving.api.dependencies import get_visitor_service
from backoffice.serving.cache import analytics_cache
from backoffice.services.visitors import VisitorService

router = APIRouter()
logger = structlog.get_logger(__name__)
settings = get_settings()

logger.info("Analytics router initialized")


class ComparisonResponse(BaseModel):
    """Period comparison with the derived performance rows"""
    comparison: ComparisonResult
    metrics: List[DerivedMetric]


GROUP_BY_PATTERN = "^(" + "|".join(GROUP_BY_OPTIONS) + ")$"


def resolve_period(start_date: Optional[date], end_date: Optional[date]) -> DateRange:
    """Missing bounds default to the configured trailing window."""
    fallback = default_period(settings.analytics.default_period_days, end_date)
    period = DateRange(
        start_date=start_date or fallback.start_date,
        end_date=end_date or fallback.end_date,
    )
    if period.start_date > period.end_date:
        raise EntityValidationError("start_date must not be after end_date", field="start_date")
    return period


@router.get("/stats", response_model=List[VisitorStatRow])
async def visitor_stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    group_by: str = Query("day", pattern=GROUP_BY_PATTERN),
    service: VisitorService = Depends(get_visitor_service),
) -> List[VisitorStatRow]:
    period = resolve_period(start_date, end_date)
    cache_key = f"stats:{period.start_date}:{period.end_date}:{group_by}"
    cached = await analytics_cache.get(cache_key)
    if cached is not None:
        logger.debug("Returning cached visitor stats")
        return [VisitorStatRow(**row) for row in cached]

    rows = await service.get_visitor_stats(period.start_date, period.end_date, group_by)
    await analytics_cache.set(cache_key, [row.model_dump() for row in rows])
    return rows


@router.get("/unique-visitors")
async def unique_visitors(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: VisitorService = Depends(get_visitor_service),
) -> Dict[str, int]:
    period = resolve_period(start_date, end_date)
    count = await analytics_cache.get_or_set(
        f"unique:{period.start_date}:{period.end_date}",
        lambda: service.get_unique_visitors_count(period.start_date, period.end_date),
    )
    return {"unique_visitors": count}


@router.get("/top-pages", response_model=List[PageStat])
async def top_pages(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(10, ge=1, le=100),
    service: VisitorService = Depends(get_visitor_service),
) -> List[PageStat]:
    period = resolve_period(start_date, end_date)
    return await service.get_top_pages(period.start_date, period.end_date, limit)


@router.get("/traffic-sources", response_model=List[TrafficSource])
async def traffic_sources(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(10, ge=1, le=100),
    service: VisitorService = Depends(get_visitor_service),
) -> List[TrafficSource]:
    period = resolve_period(start_date, end_date)
    return await service.get_traffic_sources(period.start_date, period.end_date, limit)


@router.get("/comparison", response_model=ComparisonResponse)
async def comparison(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    previous_start_date: Optional[date] = None,
    previous_end_date: Optional[date] = None,
    service: VisitorService = Depends(get_visitor_service),
) -> ComparisonResponse:
    """
    Current period against the previous one, plus the derived
    bounce-rate, pages-per-visit and new-visitor rows.
    """
    current = resolve_period(start_date, end_date)
    previous = None
    if previous_start_date and previous_end_date:
        previous = resolve_period(previous_start_date, previous_end_date)
    result = await service.compare_periods(current, previous)
    return ComparisonResponse(
        comparison=result,
        metrics=derive_metrics(result, settings.analytics.new_visitor_ratio),
    )


@router.get("/snapshot", response_model=AnalyticsSnapshot)
async def snapshot(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    group_by: str = Query("day", pattern=GROUP_BY_PATTERN),
    limit: int = Query(10, ge=1, le=100),
    compare: bool = True,
    service: VisitorService = Depends(get_visitor_service),
) -> AnalyticsSnapshot:
    period = resolve_period(start_date, end_date)
    return await service.get_snapshot(period, group_by=group_by, limit=limit, compare_with_previous=compare)


@router.get("/presets", response_model=Dict[str, DateRange])
async def presets(today: Optional[date] = None) -> Dict[str, DateRange]:
    return date_range_presets(today)
