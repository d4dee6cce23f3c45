"""View-state containers over the domain services."""

from backoffice.state.containers import AnalyticsState, ListState, SingletonState

__all__ = ["AnalyticsState", "ListState", "SingletonState"]
