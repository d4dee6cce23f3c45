"""
Derived visitor metrics.

Pure functions over two period snapshots. Bounce rate and new-visitor
share are estimates: no session-level data backs them, and the new-visitor
ratio is a configured constant.
"""

from typing import List, Optional

from backoffice.analytics.models import ComparisonResult, DerivedMetric, PeriodTotals
from backoffice.config import get_settings


def percent_change(current: float, previous: float) -> float:
    """(current - previous) / previous * 100; 0 when previous is 0."""
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


def estimated_bounce_rate(unique_visitors: int, total_visits: int) -> float:
    """
    Rough bounce estimate in [0, 100].

    ratio = unique / max(1, total); bounce = (1 - 1 / max(1, ratio)) * 100,
    clamped to [0, 100].
    """
    ratio = unique_visitors / max(1, total_visits)
    bounce = (1 - 1 / max(1, ratio)) * 100
    return min(100.0, max(0.0, bounce))


def pages_per_visit(total_visits: int, unique_visitors: int) -> float:
    return total_visits / max(1, unique_visitors)


def estimated_new_visitors(unique_visitors: int, ratio: Optional[float] = None) -> int:
    if ratio is None:
        ratio = get_settings().analytics.new_visitor_ratio
    return round(unique_visitors * ratio)


def compare_totals(current: PeriodTotals, previous: PeriodTotals) -> ComparisonResult:
    return ComparisonResult(
        current=current,
        previous=previous,
        visits_percent=percent_change(current.total_visits, previous.total_visits),
        unique_visitors_percent=percent_change(current.unique_visitors, previous.unique_visitors),
    )


def derive_metrics(comparison: ComparisonResult, new_visitor_ratio: Optional[float] = None) -> List[DerivedMetric]:
    """Bounce rate, pages per visit and new visitors for both periods."""
    current, previous = comparison.current, comparison.previous

    bounce_now = estimated_bounce_rate(current.unique_visitors, current.total_visits)
    bounce_before = estimated_bounce_rate(previous.unique_visitors, previous.total_visits)
    bounce_change = percent_change(bounce_now, bounce_before)

    ppv_now = pages_per_visit(current.total_visits, current.unique_visitors)
    ppv_before = pages_per_visit(previous.total_visits, previous.unique_visitors)
    ppv_change = percent_change(ppv_now, ppv_before)

    new_now = estimated_new_visitors(current.unique_visitors, new_visitor_ratio)
    new_before = estimated_new_visitors(previous.unique_visitors, new_visitor_ratio)
    new_change = percent_change(new_now, new_before)

    return [
        DerivedMetric(
            name="Bounce Rate",
            current=round(bounce_now, 1),
            previous=round(bounce_before, 1),
            change=round(bounce_change, 1),
            # lower is better
            improved=bounce_change <= 0,
        ),
        DerivedMetric(
            name="Pages / Visit",
            current=round(ppv_now, 1),
            previous=round(ppv_before, 1),
            change=round(ppv_change, 1),
            improved=ppv_change >= 0,
            estimated=False,
        ),
        DerivedMetric(
            name="New Visitors",
            current=new_now,
            previous=new_before,
            change=round(new_change, 1),
            improved=new_change >= 0,
        ),
    ]


def format_percent_change(value: float) -> str:
    """``12.345`` -> ``+12.3%``; negatives keep their sign."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


def format_duration(seconds: float) -> str:
    """Average visit duration as ``Xm Ys``."""
    total = int(seconds or 0)
    return f"{total // 60}m {total % 60}s"
