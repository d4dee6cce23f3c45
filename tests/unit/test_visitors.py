"""
Unit Tests - Visitor Service
"""
from datetime import date, datetime, timezone

import pytest

from backoffice.analytics.models import DateRange
from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.services.visitors import VisitorService

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


@pytest.fixture
def service(gateway):
    return VisitorService(gateway)


async def seed(gateway, page, session, when, duration=0, referer=None):
    await gateway.insert(
        "visitors",
        {
            "id": f"{session}-{page}-{when.isoformat()}",
            "session_id": session,
            "page_url": page,
            "referer": referer,
            "visited_at": when,
            "duration_seconds": duration,
        },
    )


def at(day, hour=12):
    return datetime(2024, 3, day, hour, tzinfo=timezone.utc)


class TestTracking:
    """Tests for tracking writes"""

    async def test_page_view_row(self, service, gateway):
        row = await service.track_page_view(
            "/projects",
            session_id="s-1",
            user_agent=CHROME_UA,
            referer="https://www.google.com/",
            ip_address="10.0.0.1",
            geo={"country": "ID", "city": "Bandung"},
        )

        stored = gateway.rows("visitors")[0]
        assert stored["id"] == row["id"]
        assert stored["browser"] == "Chrome"
        assert stored["os"] == "Windows"
        assert stored["device_type"] == "Desktop"
        assert stored["is_bot"] is False
        assert stored["ip_address"] == "10.0.0.1"
        assert stored["city"] == "Bandung"
        assert stored["duration_seconds"] == 0

    async def test_page_view_generates_session(self, service):
        row = await service.track_page_view("/")
        assert row["session_id"]

    async def test_page_url_required(self, service, gateway):
        with pytest.raises(EntityValidationError, match="page_url"):
            await service.track_page_view("")
        assert gateway.rows("visitors") == []

    async def test_bot_flag(self, service):
        row = await service.track_page_view("/", user_agent="Googlebot/2.1 (+http://www.google.com/bot.html)")
        assert row["is_bot"] is True

    async def test_update_duration(self, service):
        row = await service.track_page_view("/about")

        updated = await service.update_duration(row["id"], 42)

        assert updated["duration_seconds"] == 42

    async def test_negative_duration(self, service):
        with pytest.raises(EntityValidationError, match="Duration cannot be negative"):
            await service.update_duration("anything", -1)

    async def test_duration_for_missing_visit(self, service):
        with pytest.raises(EntityNotFoundError, match="Visitor not found"):
            await service.update_duration("missing", 5)

    async def test_read_time_recorded(self, service, gateway):
        row = await service.track_page_view("/articles/1")

        updated = await service.record_read_time(row["id"], 2.5)

        assert updated["duration_seconds"] == 150
        events = gateway.rows("visitor_events")
        assert [(event["event_type"], event["event_data"]) for event in events] == [
            ("read_time", {"minutes": 2.5})
        ]

    async def test_read_time_for_missing_visit_leaves_no_event(self, service, gateway):
        with pytest.raises(EntityNotFoundError, match="Visitor not found"):
            await service.record_read_time("no-such-visitor", 2.5)

        assert gateway.rows("visitor_events") == []

    async def test_missing_duration(self, service):
        with pytest.raises(EntityValidationError, match="Missing required field: duration_seconds"):
            await service.update_duration("anything", None)


class TestReads:
    """Tests for analytics reads"""

    async def test_visitor_stats_by_day(self, service, gateway):
        await seed(gateway, "/", "a", at(1, 9), duration=30)
        await seed(gateway, "/blog", "a", at(1, 10), duration=90)
        await seed(gateway, "/", "b", at(2))

        stats = await service.get_visitor_stats(date(2024, 3, 1), date(2024, 3, 2), "day")

        assert [(row.date, row.visits, row.unique_visitors, row.avg_duration) for row in stats] == [
            ("2024-03-01", 2, 1, 60),
            ("2024-03-02", 1, 1, 0),
        ]

    async def test_end_date_is_inclusive(self, service, gateway):
        await seed(gateway, "/", "late", datetime(2024, 3, 2, 23, 59, tzinfo=timezone.utc))
        await seed(gateway, "/", "next", datetime(2024, 3, 3, 0, 1, tzinfo=timezone.utc))

        assert await service.get_unique_visitors_count(date(2024, 3, 1), date(2024, 3, 2)) == 1

    async def test_invalid_group_by(self, service):
        with pytest.raises(EntityValidationError, match="group_by"):
            await service.get_visitor_stats(group_by="hour")

    async def test_top_pages_and_sources(self, service, gateway):
        await seed(gateway, "/", "a", at(5), referer="https://google.com/search")
        await seed(gateway, "/", "b", at(5), referer="https://t.co/x")
        await seed(gateway, "/blog", "c", at(5))

        pages = await service.get_top_pages(date(2024, 3, 5), date(2024, 3, 5), limit=1)
        sources = await service.get_traffic_sources(date(2024, 3, 5), date(2024, 3, 5))

        assert [(page.page_url, page.count) for page in pages] == [("/", 2)]
        assert sum(source.count for source in sources) == 3
        assert {source.referer for source in sources} == {"organic", "referral", "direct"}

    async def test_event_stats(self, service):
        await service.track_event("v-1", "click", {"target": "cta"})
        await service.track_event("v-1", "scroll")

        clicks = await service.get_event_stats("click")

        assert len(clicks) == 1
        assert clicks[0]["event_data"] == {"target": "cta"}


class TestComparison:
    """Tests for period comparison"""

    async def test_compare_with_preceding_window(self, service, gateway):
        for index in range(4):
            await seed(gateway, "/", f"now-{index % 2}", at(12 + index))
        for index in range(2):
            await seed(gateway, "/", f"before-{index}", at(5 + index))

        result = await service.compare_periods(
            DateRange(start_date=date(2024, 3, 11), end_date=date(2024, 3, 17))
        )

        assert result.current.total_visits == 4
        assert result.current.unique_visitors == 2
        assert result.previous.total_visits == 2
        assert result.visits_percent == 100.0
        assert result.unique_visitors_percent == 0.0

    async def test_empty_previous_period(self, service, gateway):
        await seed(gateway, "/", "a", at(20))

        result = await service.compare_periods(
            DateRange(start_date=date(2024, 3, 20), end_date=date(2024, 3, 20))
        )

        assert result.previous.total_visits == 0
        assert result.visits_percent == 0.0

    async def test_snapshot(self, service, gateway):
        await seed(gateway, "/", "a", at(10))
        await seed(gateway, "/blog", "a", at(10))

        period = DateRange(start_date=date(2024, 3, 10), end_date=date(2024, 3, 10))
        snapshot = await service.get_snapshot(period, compare_with_previous=True)

        assert snapshot.unique_visitors == 1
        assert len(snapshot.top_pages) == 2
        assert snapshot.comparison is not None
        assert [metric.name for metric in snapshot.metrics] == ["Bounce Rate", "Pages / Visit", "New Visitors"]

    async def test_snapshot_without_comparison(self, service):
        period = DateRange(start_date=date(2024, 3, 10), end_date=date(2024, 3, 10))
        snapshot = await service.get_snapshot(period)

        assert snapshot.visitor_stats == []
        assert snapshot.comparison is None
        assert snapshot.metrics == []
