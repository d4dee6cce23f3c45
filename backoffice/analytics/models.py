"""Analytics value types."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class PeriodTotals(BaseModel):
    """Visit counts of one reporting period"""
    total_visits: int = Field(ge=0)
    unique_visitors: int = Field(ge=0)


class ComparisonResult(BaseModel):
    """Current vs previous period, with the raw percentage changes"""
    current: PeriodTotals
    previous: PeriodTotals
    visits_percent: float
    unique_visitors_percent: float


class DerivedMetric(BaseModel):
    """One row of the performance comparison table"""
    name: str
    current: float
    previous: float
    change: float
    improved: bool
    estimated: bool = True


class VisitorStatRow(BaseModel):
    """Visits grouped under one date key (day, week, month or year)"""
    date: str
    visits: int
    unique_visitors: int
    avg_duration: int


class PageStat(BaseModel):
    page_url: str
    count: int
    avg_duration: int


class TrafficSource(BaseModel):
    referer: str
    count: int
    percent: int


class DateRange(BaseModel):
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days


class AnalyticsSnapshot(BaseModel):
    """Everything the analytics dashboard loads for one filter set"""
    period: DateRange
    group_by: str
    visitor_stats: List[VisitorStatRow]
    unique_visitors: int
    top_pages: List[PageStat]
    traffic_sources: List[TrafficSource]
    comparison: Optional[ComparisonResult] = None
    metrics: List[DerivedMetric] = []
