"""
Visitor tracking and analytics reads.

Page views are stored one row per view; every statistic is computed from
raw rows fetched for the requested period.
"""

from __future__ import annotations

import asyncio
import functools
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Mapping, Optional

import structlog

from backoffice.analytics.aggregation import (
    GROUP_BY_OPTIONS,
    count_unique_visitors,
    group_visitor_stats,
    parse_user_agent,
    top_pages,
    traffic_sources,
)
from backoffice.analytics.metrics import compare_totals, derive_metrics
from backoffice.analytics.models import (
    AnalyticsSnapshot,
    ComparisonResult,
    DateRange,
    PageStat,
    PeriodTotals,
    TrafficSource,
    VisitorStatRow,
)
from backoffice.analytics.periods import previous_period
from backoffice.config import get_settings
from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.gateway.base import GatewayResponse, Predicate, QueryGateway, Row, eq, gte, lte
from backoffice.services.base import utcnow
from backoffice.services.compensation import CompensationLog
from backoffice.services.validation import require

logger = structlog.get_logger(__name__)

VISITORS_TABLE = "visitors"
EVENTS_TABLE = "visitor_events"


def _period_filters(column: str, start: Optional[date], end: Optional[date]) -> List[Predicate]:
    filters: List[Predicate] = []
    if start is not None:
        filters.append(gte(column, datetime.combine(start, time.min, tzinfo=timezone.utc)))
    if end is not None:
        filters.append(lte(column, datetime.combine(end, time.max, tzinfo=timezone.utc)))
    return filters


class VisitorService:
    """Tracking writes and analytics reads over ``visitors`` and ``visitor_events``."""

    label = "visitor"

    def __init__(self, gateway: QueryGateway) -> None:
        self.gateway = gateway
        self.settings = get_settings().analytics

    def _check(self, response: GatewayResponse, action: str) -> GatewayResponse:
        if response.error is not None:
            logger.error(f"Error {action}", error=str(response.error))
        return response.raise_for_error()

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    async def track_page_view(
        self,
        page_url: str,
        session_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
        ip_address: Optional[str] = None,
        geo: Optional[Mapping[str, Any]] = None,
    ) -> Row:
        """Insert one ``visitors`` row with the parsed user agent."""
        require(page_url, "Missing required field: page_url", field="page_url")
        info = parse_user_agent(user_agent)
        geo = geo or {}
        now = utcnow()
        row = {
            "id": str(uuid.uuid4()),
            "session_id": session_id or str(uuid.uuid4()),
            "user_agent": user_agent,
            "browser": info.browser,
            "os": info.os,
            "device_type": info.device_type,
            "is_bot": info.is_bot,
            "ip_address": geo.get("ip") or ip_address,
            "country": geo.get("country"),
            "region": geo.get("region"),
            "city": geo.get("city"),
            "latitude": geo.get("latitude"),
            "longitude": geo.get("longitude"),
            "page_url": page_url,
            "referer": referer,
            "visited_at": now,
            "duration_seconds": 0,
            "created_at": now,
            "updated_at": now,
        }
        stored = self._check(await self.gateway.insert(VISITORS_TABLE, row), "tracking page view").first
        logger.debug("Tracked page view", page_url=page_url, browser=info.browser, is_bot=info.is_bot)
        return stored

    async def track_event(
        self,
        visitor_id: str,
        event_type: str,
        event_data: Optional[Mapping[str, Any]] = None,
    ) -> Row:
        require(event_type, "Missing required field: event_type", field="event_type")
        row = {
            "id": str(uuid.uuid4()),
            "visitor_id": visitor_id,
            "event_type": event_type,
            "event_data": dict(event_data or {}),
            "event_time": utcnow(),
        }
        return self._check(await self.gateway.insert(EVENTS_TABLE, row), f"tracking event {event_type}").first

    async def update_duration(self, visitor_id: str, seconds: int) -> Row:
        if seconds is None:
            raise EntityValidationError("Missing required field: duration_seconds", field="duration_seconds")
        if seconds < 0:
            raise EntityValidationError("Duration cannot be negative", field="duration")
        row = self._check(
            await self.gateway.update(
                VISITORS_TABLE,
                {"duration_seconds": int(seconds), "updated_at": utcnow()},
                [eq("id", visitor_id)],
            ),
            "updating visitor duration",
        ).first
        if row is None:
            raise EntityNotFoundError("Visitor not found")
        return row

    async def record_read_time(self, visitor_id: str, minutes: float) -> Row:
        """Store a read-time submission as an event and as the visit duration."""
        async with CompensationLog("record read time") as log:
            event = await self.track_event(visitor_id, "read_time", {"minutes": minutes})
            log.record(
                f"delete {EVENTS_TABLE} {event['id']}",
                functools.partial(self.gateway.delete, EVENTS_TABLE, [eq("id", event["id"])]),
            )
            return await self.update_duration(visitor_id, round(minutes * 60))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _visits(self, start: Optional[date], end: Optional[date], columns=None) -> List[Row]:
        response = self._check(
            await self.gateway.select(
                VISITORS_TABLE,
                columns=columns,
                filters=_period_filters("visited_at", start, end),
            ),
            "getting visitor stats",
        )
        return response.data

    async def get_visitor_stats(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        group_by: str = "day",
    ) -> List[VisitorStatRow]:
        if group_by not in GROUP_BY_OPTIONS:
            raise EntityValidationError(f"group_by must be one of {list(GROUP_BY_OPTIONS)}", field="group_by")
        rows = await self._visits(start, end, ["visited_at", "session_id", "duration_seconds"])
        return group_visitor_stats(rows, group_by)

    async def get_unique_visitors_count(self, start: Optional[date] = None, end: Optional[date] = None) -> int:
        return count_unique_visitors(await self._visits(start, end, ["session_id"]))

    async def get_top_pages(
        self, start: Optional[date] = None, end: Optional[date] = None, limit: Optional[int] = None
    ) -> List[PageStat]:
        rows = await self._visits(start, end, ["page_url", "duration_seconds"])
        return top_pages(rows, limit or self.settings.top_limit)

    async def get_traffic_sources(
        self, start: Optional[date] = None, end: Optional[date] = None, limit: Optional[int] = None
    ) -> List[TrafficSource]:
        rows = await self._visits(start, end, ["referer"])
        return traffic_sources(rows, limit or self.settings.top_limit)

    async def get_event_stats(
        self,
        event_type: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Row]:
        filters = _period_filters("event_time", start, end)
        if event_type:
            filters.append(eq("event_type", event_type))
        return self._check(
            await self.gateway.select(EVENTS_TABLE, filters=filters), "getting event stats"
        ).data

    async def _period_totals(self, period: DateRange) -> PeriodTotals:
        rows = await self._visits(period.start_date, period.end_date, ["session_id"])
        return PeriodTotals(total_visits=len(rows), unique_visitors=count_unique_visitors(rows))

    async def compare_periods(
        self, current: DateRange, previous: Optional[DateRange] = None
    ) -> ComparisonResult:
        """Both periods are fetched concurrently; ``previous`` defaults to the preceding window."""
        previous = previous or previous_period(current)
        current_totals, previous_totals = await asyncio.gather(
            self._period_totals(current), self._period_totals(previous)
        )
        return compare_totals(current_totals, previous_totals)

    async def get_snapshot(
        self,
        period: DateRange,
        group_by: str = "day",
        limit: Optional[int] = None,
        compare_with_previous: bool = False,
    ) -> AnalyticsSnapshot:
        """All dashboard aggregates for one filter set, fetched together."""
        stats, unique, pages, sources = await asyncio.gather(
            self.get_visitor_stats(period.start_date, period.end_date, group_by),
            self.get_unique_visitors_count(period.start_date, period.end_date),
            self.get_top_pages(period.start_date, period.end_date, limit),
            self.get_traffic_sources(period.start_date, period.end_date, limit),
        )
        comparison = None
        metrics: List[Any] = []
        if compare_with_previous:
            comparison = await self.compare_periods(period)
            metrics = derive_metrics(comparison, self.settings.new_visitor_ratio)
        return AnalyticsSnapshot(
            period=period,
            group_by=group_by,
            visitor_stats=stats,
            unique_visitors=unique,
            top_pages=pages,
            traffic_sources=sources,
            comparison=comparison,
            metrics=metrics,
        )
