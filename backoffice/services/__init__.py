"""Domain services over the Query Gateway."""

from backoffice.services.base import (
    AssetSpec,
    ChildSpec,
    EntityService,
    LinkSpec,
    ListResult,
    ReferenceSpec,
    SingletonService,
    UsageGuard,
)
from backoffice.services.compensation import CompensationLog

__all__ = [
    "AssetSpec",
    "ChildSpec",
    "CompensationLog",
    "EntityService",
    "LinkSpec",
    "ListResult",
    "ReferenceSpec",
    "SingletonService",
    "UsageGuard",
]
