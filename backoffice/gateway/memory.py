"""
In-process implementations of the gateway and object storage contracts.

Used by the test-suite and for local demos without a hosted backend. Rows
are deep-copied on the way in and out so callers never alias stored state.
"""

from __future__ import annotations

import copy
import re
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from backoffice.errors import GatewayError, StorageError
from backoffice.gateway.base import AnyOf, Filter, GatewayResponse, Order, Predicate, Row


def _like_to_regex(pattern: str) -> re.Pattern:
    parts = [re.escape(chunk) for chunk in str(pattern).split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def _column_value(row: Row, flt: Filter) -> Any:
    value = row.get(flt.column)
    if flt.key is not None:
        if isinstance(value, dict):
            return value.get(flt.key)
        return None
    return value


def _matches(row: Row, predicate: Predicate) -> bool:
    if isinstance(predicate, AnyOf):
        return any(_matches(row, item) for item in predicate.filters)

    value = _column_value(row, predicate)
    target = predicate.value
    op = predicate.op
    if op == "eq":
        return value == target
    if op == "neq":
        return value != target
    if op == "in":
        return value in target
    if op == "is_null":
        return value is None
    if op == "not_null":
        return value is not None
    if op == "ilike":
        return value is not None and bool(_like_to_regex(target).match(str(value)))
    if value is None:
        return False
    if op == "gt":
        return value > target
    if op == "gte":
        return value >= target
    if op == "lt":
        return value < target
    if op == "lte":
        return value <= target
    raise ValueError(f"Unsupported filter operator: {op}")


class InMemoryGateway:
    """
    Dictionary-backed store honoring the ``QueryGateway`` contract.

    ``fail_next(table, operation)`` queues an error for the next matching call
    so tests can exercise partial multi-step failures.
    """

    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None) -> None:
        self.tables: Dict[str, List[Row]] = defaultdict(list)
        self._next_id: Dict[str, int] = defaultdict(lambda: 1)
        self._failures: Dict[Tuple[str, str], List[GatewayError]] = defaultdict(list)
        self.calls: List[Tuple[str, str]] = []
        for name, rows in (tables or {}).items():
            for row in rows:
                self._store(name, row)

    def fail_next(self, table: str, operation: str, error: Optional[GatewayError] = None) -> None:
        self._failures[(table, operation)].append(
            error or GatewayError(f"Simulated {operation} failure on {table}")
        )

    def rows(self, table: str) -> List[Row]:
        return copy.deepcopy(self.tables.get(table, []))

    def _pop_failure(self, table: str, operation: str) -> Optional[GatewayError]:
        self.calls.append((table, operation))
        queued = self._failures.get((table, operation))
        if queued:
            return queued.pop(0)
        return None

    def _store(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        if stored.get("id") is None:
            stored["id"] = self._next_id[table]
        if isinstance(stored["id"], int):
            self._next_id[table] = max(self._next_id[table], stored["id"] + 1)
        self.tables[table].append(stored)
        return stored

    async def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Sequence[Predicate] = (),
        order: Sequence[Order] = (),
        range: Optional[Tuple[int, int]] = None,
        count: bool = False,
    ) -> GatewayResponse:
        failure = self._pop_failure(table, "select")
        if failure:
            return GatewayResponse(error=failure)

        matched = [row for row in self.tables.get(table, []) if all(_matches(row, f) for f in filters)]
        for item in reversed(list(order)):
            present = [row for row in matched if row.get(item.column) is not None]
            missing = [row for row in matched if row.get(item.column) is None]
            present.sort(key=lambda row: row[item.column], reverse=not item.ascending)
            matched = present + missing

        total = len(matched) if count else None
        if range is not None:
            start, end = range
            matched = matched[start:end + 1]

        if columns:
            data = [{name: copy.deepcopy(row.get(name)) for name in columns} for row in matched]
        else:
            data = copy.deepcopy(matched)
        return GatewayResponse(data=data, count=total)

    async def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> GatewayResponse:
        failure = self._pop_failure(table, "insert")
        if failure:
            return GatewayResponse(error=failure)

        batch = [rows] if isinstance(rows, dict) else list(rows)
        stored = [self._store(table, row) for row in batch]
        return GatewayResponse(data=copy.deepcopy(stored), count=len(stored))

    async def update(self, table: str, values: Row, match: Sequence[Predicate]) -> GatewayResponse:
        failure = self._pop_failure(table, "update")
        if failure:
            return GatewayResponse(error=failure)

        updated = []
        for row in self.tables.get(table, []):
            if all(_matches(row, f) for f in match):
                row.update(copy.deepcopy(values))
                updated.append(copy.deepcopy(row))
        return GatewayResponse(data=updated, count=len(updated))

    async def delete(self, table: str, match: Sequence[Predicate]) -> GatewayResponse:
        failure = self._pop_failure(table, "delete")
        if failure:
            return GatewayResponse(error=failure)

        kept, removed = [], []
        for row in self.tables.get(table, []):
            (removed if all(_matches(row, f) for f in match) else kept).append(row)
        self.tables[table] = kept
        return GatewayResponse(data=copy.deepcopy(removed), count=len(removed))

    async def ping(self) -> bool:
        return True


class InMemoryObjectStorage:
    """Object storage double that keeps uploads in a dict."""

    def __init__(self, public_base_url: str = "") -> None:
        self.objects: Dict[str, bytes] = {}
        self.removed: List[str] = []
        self.fail_removals = False
        self._public_base_url = public_base_url.rstrip("/")

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        self.objects[path] = content
        return path

    async def remove(self, paths: Sequence[str]) -> None:
        self.removed.extend(paths)
        if self.fail_removals:
            raise StorageError(f"Failed to remove {list(paths)}")
        for path in paths:
            self.objects.pop(path, None)

    def get_public_url(self, path: str) -> str:
        return f"{self._public_base_url}/{path.lstrip('/')}"
