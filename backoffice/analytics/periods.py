"""Reporting periods and date-range presets."""

from datetime import date, timedelta
from typing import Dict, Optional

from backoffice.analytics.models import DateRange


def previous_period(current: DateRange) -> DateRange:
    """
    Period of the same length ending the day before ``current`` starts.
    """
    previous_end = current.start_date - timedelta(days=1)
    previous_start = previous_end - timedelta(days=current.days)
    return DateRange(start_date=previous_start, end_date=previous_end)


def default_period(days: int = 30, today: Optional[date] = None) -> DateRange:
    today = today or date.today()
    return DateRange(start_date=today - timedelta(days=days), end_date=today)


def date_range_presets(today: Optional[date] = None) -> Dict[str, DateRange]:
    """Named ranges offered by the analytics filter panel."""
    today = today or date.today()
    yesterday = today - timedelta(days=1)
    first_of_month = today.replace(day=1)
    last_month_end = first_of_month - timedelta(days=1)

    return {
        "today": DateRange(start_date=today, end_date=today),
        "yesterday": DateRange(start_date=yesterday, end_date=yesterday),
        "last_7_days": DateRange(start_date=today - timedelta(days=7), end_date=today),
        "last_30_days": DateRange(start_date=today - timedelta(days=30), end_date=today),
        "this_month": DateRange(start_date=first_of_month, end_date=today),
        "last_month": DateRange(start_date=last_month_end.replace(day=1), end_date=last_month_end),
        "this_year": DateRange(start_date=date(today.year, 1, 1), end_date=today),
        "last_year": DateRange(
            start_date=date(today.year - 1, 1, 1), end_date=date(today.year - 1, 12, 31)
        ),
    }
