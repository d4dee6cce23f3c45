"""
Aggregation of raw visitor rows.

Grouping, top pages and traffic source breakdowns over ``visitors`` rows as
returned by the gateway. All functions are pure.
"""

from __future__ import annotations

import math
import re
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from backoffice.analytics.models import PageStat, TrafficSource, VisitorStatRow

GROUP_BY_OPTIONS = ("day", "week", "month", "year")

BOT_PATTERN = re.compile(r"bot|crawler|spider|crawling", re.IGNORECASE)

SOURCE_KEYWORDS = (
    ("organic", ("google", "bing", "yahoo")),
    ("social", ("facebook", "twitter", "instagram", "linkedin")),
    ("email", ("mail", "outlook", "gmail")),
)


@dataclass(frozen=True)
class UserAgentInfo:
    browser: str
    os: str
    device_type: str
    is_bot: bool


def parse_user_agent(user_agent: Optional[str]) -> UserAgentInfo:
    """Keyword-based browser / OS / device detection."""
    ua = (user_agent or "").lower()

    browser = "Unknown"
    if "chrome" in ua and "edg" not in ua and "opr" not in ua:
        browser = "Chrome"
    elif "firefox" in ua:
        browser = "Firefox"
    elif "safari" in ua and "chrome" not in ua:
        browser = "Safari"
    elif "edg" in ua:
        browser = "Edge"
    elif "opr" in ua or "opera" in ua:
        browser = "Opera"
    elif "msie" in ua or "trident" in ua:
        browser = "Internet Explorer"

    os_name = "Unknown"
    if "windows" in ua:
        os_name = "Windows"
    elif "macintosh" in ua or "mac os" in ua:
        os_name = "macOS"
    elif "android" in ua:
        os_name = "Android"
    elif "iphone" in ua or "ipad" in ua:
        os_name = "iOS"
    elif "linux" in ua:
        os_name = "Linux"

    if "mobile" in ua:
        device_type = "Mobile"
    elif "tablet" in ua:
        device_type = "Tablet"
    else:
        device_type = "Desktop"

    return UserAgentInfo(browser, os_name, device_type, bool(BOT_PATTERN.search(ua)))


def as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(timezone.utc)


def group_key(moment: datetime, group_by: str) -> str:
    """
    Bucket label for a visit time.

    Weeks are numbered within their month: ceil((day + weekday of the 1st,
    Sunday = 0) / 7), e.g. ``2024-W3``.
    """
    if group_by == "day":
        return moment.strftime("%Y-%m-%d")
    if group_by == "week":
        first_weekday = (moment.replace(day=1).weekday() + 1) % 7
        week = math.ceil((moment.day + first_weekday) / 7)
        return f"{moment.year}-W{week}"
    if group_by == "month":
        return f"{moment.year}-{moment.month:02d}"
    if group_by == "year":
        return f"{moment.year}"
    raise ValueError(f"Unsupported group_by: {group_by}")


def group_visitor_stats(rows: Iterable[Mapping[str, Any]], group_by: str = "day") -> List[VisitorStatRow]:
    """Visits, unique sessions and average duration per bucket, sorted by key."""
    buckets: Dict[str, Dict[str, Any]] = defaultdict(
        lambda: {"count": 0, "sessions": set(), "duration": 0}
    )
    for row in rows:
        bucket = buckets[group_key(as_datetime(row.get("visited_at")), group_by)]
        bucket["count"] += 1
        bucket["sessions"].add(row.get("session_id"))
        bucket["duration"] += row.get("duration_seconds") or 0

    return [
        VisitorStatRow(
            date=key,
            visits=bucket["count"],
            unique_visitors=len(bucket["sessions"]),
            avg_duration=round(bucket["duration"] / bucket["count"]) if bucket["count"] else 0,
        )
        for key, bucket in sorted(buckets.items())
    ]


def count_unique_visitors(rows: Iterable[Mapping[str, Any]]) -> int:
    return len({row.get("session_id") for row in rows if row.get("session_id")})


def top_pages(rows: Iterable[Mapping[str, Any]], limit: int = 10) -> List[PageStat]:
    """Most visited pages with their average duration in seconds."""
    counts: Counter = Counter()
    durations: Dict[str, int] = defaultdict(int)
    for row in rows:
        page = row.get("page_url")
        counts[page] += 1
        durations[page] += row.get("duration_seconds") or 0

    stats = [
        PageStat(page_url=page, count=count, avg_duration=round(durations[page] / count))
        for page, count in counts.items()
    ]
    stats.sort(key=lambda stat: stat.count, reverse=True)
    return stats[:limit]


def categorize_referer(referer: Optional[str]) -> str:
    """direct / organic / social / email / referral."""
    if not referer:
        return "direct"
    for category, keywords in SOURCE_KEYWORDS:
        if any(keyword in referer for keyword in keywords):
            return category
    return "referral"


def traffic_sources(rows: Iterable[Mapping[str, Any]], limit: int = 10) -> List[TrafficSource]:
    """Visit counts per source category with rounded percentages of all visits."""
    counts: Counter = Counter(categorize_referer(row.get("referer")) for row in rows)
    total = sum(counts.values())
    sources = [
        TrafficSource(referer=category, count=count, percent=round(count / total * 100))
        for category, count in counts.items()
    ]
    sources.sort(key=lambda source: source.count, reverse=True)
    return sources[:limit]
