"""Visitor analytics: aggregation, derived metrics, periods and trackers."""

from backoffice.analytics.metrics import (
    derive_metrics,
    estimated_bounce_rate,
    estimated_new_visitors,
    format_percent_change,
    pages_per_visit,
    percent_change,
)
from backoffice.analytics.read_time import ReadTimeTracker
from backoffice.analytics.sessions import SessionTracker

__all__ = [
    "derive_metrics",
    "estimated_bounce_rate",
    "estimated_new_visitors",
    "format_percent_change",
    "pages_per_visit",
    "percent_change",
    "ReadTimeTracker",
    "SessionTracker",
]
