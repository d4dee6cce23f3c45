"""Query Gateway contract and its implementations."""

from backoffice.gateway.base import (
    AnyOf,
    Filter,
    GatewayResponse,
    ObjectStorage,
    Order,
    QueryGateway,
    Row,
    any_of,
    eq,
    gt,
    gte,
    ilike,
    in_,
    is_null,
    lt,
    lte,
    neq,
    not_null,
)
from backoffice.gateway.memory import InMemoryGateway, InMemoryObjectStorage
from backoffice.gateway.sqlalchemy import SQLAlchemyGateway
from backoffice.gateway.storage import LocalObjectStorage

__all__ = [
    "AnyOf",
    "Filter",
    "GatewayResponse",
    "ObjectStorage",
    "Order",
    "QueryGateway",
    "Row",
    "any_of",
    "eq",
    "gt",
    "gte",
    "ilike",
    "in_",
    "is_null",
    "lt",
    "lte",
    "neq",
    "not_null",
    "InMemoryGateway",
    "InMemoryObjectStorage",
    "LocalObjectStorage",
    "SQLAlchemyGateway",
]
