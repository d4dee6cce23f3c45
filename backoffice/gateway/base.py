"""
Query Gateway contract.

Every domain service talks to the hosted store through this narrow
interface: filtered/sorted/paginated selects plus single-statement insert,
update and delete over named collections, and an object storage client for
binary assets. Operations report failures in ``GatewayResponse.error``
rather than raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from backoffice.errors import GatewayError

Row = Dict[str, Any]

FILTER_OPERATORS = frozenset(
    {"eq", "neq", "gt", "gte", "lt", "lte", "in", "ilike", "is_null", "not_null"}
)


@dataclass(frozen=True)
class Filter:
    """
    Single column predicate.

    ``key`` addresses a member of a JSON column (e.g. the ``en`` entry of a
    multilingual title).
    """
    column: str
    op: str
    value: Any = None
    key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class AnyOf:
    """OR-group of predicates."""
    filters: Tuple[Filter, ...]


Predicate = Union[Filter, AnyOf]


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = False


@dataclass
class GatewayResponse:
    """Result envelope of a gateway call: ``{data, error, count}``."""
    data: List[Row] = field(default_factory=list)
    error: Optional[GatewayError] = None
    count: Optional[int] = None

    @property
    def first(self) -> Optional[Row]:
        return self.data[0] if self.data else None

    def raise_for_error(self) -> "GatewayResponse":
        """Re-raise the gateway's error unchanged; return self otherwise."""
        if self.error is not None:
            raise self.error
        return self


def eq(column: str, value: Any, key: Optional[str] = None) -> Filter:
    return Filter(column, "eq", value, key)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column, "gt", value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def ilike(column: str, pattern: str, key: Optional[str] = None) -> Filter:
    return Filter(column, "ilike", pattern, key)


def is_null(column: str) -> Filter:
    return Filter(column, "is_null")


def not_null(column: str) -> Filter:
    return Filter(column, "not_null")


def any_of(*filters: Filter) -> AnyOf:
    return AnyOf(tuple(filters))


class QueryGateway(Protocol):
    """Hosted relational store reachable through generic CRUD calls."""

    async def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Sequence[Predicate] = (),
        order: Sequence[Order] = (),
        range: Optional[Tuple[int, int]] = None,
        count: bool = False,
    ) -> GatewayResponse: ...

    async def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> GatewayResponse: ...

    async def update(self, table: str, values: Row, match: Sequence[Predicate]) -> GatewayResponse: ...

    async def delete(self, table: str, match: Sequence[Predicate]) -> GatewayResponse: ...

    async def ping(self) -> bool: ...


class ObjectStorage(Protocol):
    """Binary asset store keyed by relative path."""

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str: ...

    async def remove(self, paths: Sequence[str]) -> None: ...

    def get_public_url(self, path: str) -> str: ...
