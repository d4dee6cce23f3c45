"""
View-state containers.

Page-level state holders over the domain services. Each exposes
``data``, ``loading`` and ``error`` and re-reads from the service after
every successful mutation, so the held rows always mirror the store.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from backoffice.analytics.models import AnalyticsSnapshot, DateRange
from backoffice.analytics.periods import date_range_presets, default_period
from backoffice.errors import BackofficeError
from backoffice.files import UploadedFile
from backoffice.gateway.base import Row
from backoffice.services.base import EntityService, SingletonService
from backoffice.services.visitors import VisitorService

logger = structlog.get_logger(__name__)


class _StateBase:
    def __init__(self) -> None:
        self.loading = False
        self.error: Optional[str] = None

    @asynccontextmanager
    async def _busy(self, action: str, reraise: bool = True):
        """Flip ``loading`` around an operation and record its failure message."""
        self.loading = True
        self.error = None
        try:
            yield
        except BackofficeError as e:
            self.error = str(e)
            logger.warning(f"{type(self).__name__} {action} failed", error=self.error)
            if reraise:
                raise
        finally:
            self.loading = False


class ListState(_StateBase):
    """
    Collection state: ``data``, ``total_count``, ``loading``, ``error``
    plus the active filters.

    ``refresh`` records a failure in ``error`` and keeps the previous rows;
    mutations record it and re-raise so the caller can react.
    """

    def __init__(self, service: EntityService, filters: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self.service = service
        self.filters: Dict[str, Any] = dict(filters or {})
        self.data: List[Row] = []
        self.total_count = 0

    async def refresh(self) -> List[Row]:
        async with self._busy("refresh", reraise=False):
            result = await self.service.get_all(self.filters)
            self.data = result.data
            self.total_count = result.count
        return self.data

    async def set_filters(self, **filters: Any) -> List[Row]:
        """Merge filter values (``None`` removes a filter) and reload."""
        for name, value in filters.items():
            if value is None:
                self.filters.pop(name, None)
            else:
                self.filters[name] = value
        return await self.refresh()

    async def get(self, entity_id: Any, with_relations: bool = True) -> Optional[Row]:
        async with self._busy("get"):
            return await self.service.get_by_id(entity_id, with_relations=with_relations)

    async def create(
        self,
        data: Mapping[str, Any],
        related_ids: Optional[Mapping[str, Sequence[Any]]] = None,
        files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> Row:
        async with self._busy("create"):
            row = await self.service.create(data, related_ids=related_ids, files=files)
        await self.refresh()
        return row

    async def update(
        self,
        entity_id: Any,
        data: Mapping[str, Any],
        related_ids: Optional[Mapping[str, Sequence[Any]]] = None,
        files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> Row:
        async with self._busy("update"):
            row = await self.service.update(entity_id, data, related_ids=related_ids, files=files)
        await self.refresh()
        return row

    async def delete(self, entity_id: Any) -> None:
        async with self._busy("delete"):
            await self.service.delete(entity_id)
        await self.refresh()


class SingletonState(_StateBase):
    """State of a one-row page such as About or Contact."""

    def __init__(self, service: SingletonService) -> None:
        super().__init__()
        self.service = service
        self.data: Optional[Row] = None

    async def load(self) -> Optional[Row]:
        async with self._busy("load", reraise=False):
            self.data = await self.service.get()
        return self.data

    async def save(self, data: Mapping[str, Any], files: Optional[Mapping[str, UploadedFile]] = None) -> Row:
        async with self._busy("save"):
            row = await self.service.save(data, files=files)
        await self.load()
        return row


class AnalyticsState(_StateBase):
    """Dashboard state: one snapshot for the selected period and grouping."""

    def __init__(
        self,
        service: VisitorService,
        period: Optional[DateRange] = None,
        group_by: str = "day",
        compare_with_previous: bool = True,
    ) -> None:
        super().__init__()
        self.service = service
        self.period = period or default_period(service.settings.default_period_days)
        self.group_by = group_by
        self.compare_with_previous = compare_with_previous
        self.snapshot: Optional[AnalyticsSnapshot] = None

    async def load(self) -> Optional[AnalyticsSnapshot]:
        async with self._busy("load", reraise=False):
            self.snapshot = await self.service.get_snapshot(
                self.period,
                group_by=self.group_by,
                compare_with_previous=self.compare_with_previous,
            )
        return self.snapshot

    async def set_period(
        self,
        start_date: date,
        end_date: date,
        group_by: Optional[str] = None,
    ) -> Optional[AnalyticsSnapshot]:
        self.period = DateRange(start_date=start_date, end_date=end_date)
        if group_by:
            self.group_by = group_by
        return await self.load()

    async def apply_preset(self, name: str, today: Optional[date] = None) -> Optional[AnalyticsSnapshot]:
        presets = date_range_presets(today)
        if name not in presets:
            raise KeyError(f"Unknown date range preset: {name}")
        self.period = presets[name]
        return await self.load()
