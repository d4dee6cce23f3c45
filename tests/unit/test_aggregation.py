"""
Unit Tests - Visitor Aggregation and Periods
"""
from datetime import date, datetime, timezone

from backoffice.analytics.aggregation import (
    categorize_referer,
    count_unique_visitors,
    group_key,
    group_visitor_stats,
    parse_user_agent,
    top_pages,
    traffic_sources,
)
from backoffice.analytics.models import DateRange
from backoffice.analytics.periods import date_range_presets, default_period, previous_period

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


def visit(day, session, page="/", duration=0, referer=None):
    return {
        "visited_at": datetime(2024, 1, day, 12, 0, tzinfo=timezone.utc),
        "session_id": session,
        "page_url": page,
        "duration_seconds": duration,
        "referer": referer,
    }


class TestUserAgent:
    """Tests for user agent parsing"""

    def test_chrome_on_windows(self):
        info = parse_user_agent(CHROME_WINDOWS)
        assert info.browser == "Chrome"
        assert info.os == "Windows"
        assert info.device_type == "Desktop"
        assert info.is_bot is False

    def test_safari_on_iphone(self):
        info = parse_user_agent(SAFARI_IPHONE)
        assert info.browser == "Safari"
        assert info.device_type == "Mobile"

    def test_bot(self):
        info = parse_user_agent("Googlebot/2.1 (+http://www.google.com/bot.html)")
        assert info.is_bot is True

    def test_missing(self):
        info = parse_user_agent(None)
        assert info.browser == "Unknown"
        assert info.os == "Unknown"


class TestGrouping:
    """Tests for bucketing visits"""

    def test_group_keys(self):
        moment = datetime(2024, 1, 17, 8, 30)
        assert group_key(moment, "day") == "2024-01-17"
        assert group_key(moment, "month") == "2024-01"
        assert group_key(moment, "year") == "2024"

    def test_week_of_month(self):
        """January 2024 starts on a Monday (offset 1 from Sunday)"""
        assert group_key(datetime(2024, 1, 1), "week") == "2024-W1"
        assert group_key(datetime(2024, 1, 6), "week") == "2024-W1"
        assert group_key(datetime(2024, 1, 7), "week") == "2024-W2"

    def test_group_visitor_stats(self):
        rows = [
            visit(2, "a", duration=30),
            visit(2, "a", duration=90),
            visit(2, "b", duration=0),
            visit(1, "c", duration=10),
        ]

        stats = group_visitor_stats(rows, "day")

        assert [row.date for row in stats] == ["2024-01-01", "2024-01-02"]
        assert stats[1].visits == 3
        assert stats[1].unique_visitors == 2
        assert stats[1].avg_duration == 40

    def test_iso_strings_accepted(self):
        rows = [{"visited_at": "2024-03-05T10:00:00Z", "session_id": "x"}]
        assert group_visitor_stats(rows, "month")[0].date == "2024-03"

    def test_count_unique_visitors(self):
        assert count_unique_visitors([visit(1, "a"), visit(1, "a"), visit(2, "b")]) == 2


class TestTopPagesAndSources:
    """Tests for top pages and traffic sources"""

    def test_top_pages(self):
        rows = [
            visit(1, "a", "/blog", 60),
            visit(1, "b", "/blog", 0),
            visit(1, "c", "/", 10),
        ]

        pages = top_pages(rows, limit=1)

        assert len(pages) == 1
        assert pages[0].page_url == "/blog"
        assert pages[0].count == 2
        assert pages[0].avg_duration == 30

    def test_categorize_referer(self):
        assert categorize_referer(None) == "direct"
        assert categorize_referer("https://www.google.com/") == "organic"
        assert categorize_referer("https://www.linkedin.com/feed") == "social"
        assert categorize_referer("https://mail.yahoo.com") == "organic"
        assert categorize_referer("https://outlook.live.com") == "email"
        assert categorize_referer("https://news.ycombinator.com") == "referral"

    def test_traffic_sources(self):
        rows = [
            visit(1, "a"),
            visit(1, "b"),
            visit(1, "c", referer="https://google.com"),
        ]

        sources = traffic_sources(rows)

        assert sources[0].referer == "direct"
        assert sources[0].count == 2
        assert sources[0].percent == 67
        assert sources[1].percent == 33


class TestPeriods:
    """Tests for reporting periods"""

    def test_previous_period_same_length(self):
        current = DateRange(start_date=date(2024, 1, 11), end_date=date(2024, 1, 20))

        previous = previous_period(current)

        assert previous.end_date == date(2024, 1, 10)
        assert previous.days == current.days

    def test_default_period(self):
        period = default_period(30, today=date(2024, 3, 31))
        assert period.start_date == date(2024, 3, 1)
        assert period.end_date == date(2024, 3, 31)

    def test_presets(self):
        presets = date_range_presets(today=date(2024, 3, 15))

        assert presets["yesterday"].start_date == date(2024, 3, 14)
        assert presets["this_month"].start_date == date(2024, 3, 1)
        assert presets["last_month"].start_date == date(2024, 2, 1)
        assert presets["last_month"].end_date == date(2024, 2, 29)
        assert presets["last_year"].end_date == date(2023, 12, 31)
