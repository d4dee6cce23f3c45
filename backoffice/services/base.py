"""
Domain service base classes.

Every collection entity follows the same contract:
``get_all(filters)``, ``get_by_id(id)``, ``create(data, related_ids)``,
``update(id, data, related_ids)`` and ``delete(id)``. Subclasses describe
their table declaratively (multilingual fields, searchable fields, URL
fields, stored assets, junction links, foreign keys, delete guards) and add
entity rules in ``validate``.

Writes that touch more than one collection run under a ``CompensationLog``
so a failed step undoes the steps before it.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from backoffice.database.models import Base
from backoffice.errors import (
    BackofficeError,
    EntityNotFoundError,
    EntityValidationError,
    ReferenceInUseError,
    StorageError,
)
from backoffice.files import UploadedFile, delete_file, is_external_url, is_icon_class, save_file, save_image
from backoffice.gateway.base import (
    GatewayResponse,
    ObjectStorage,
    Order,
    Predicate,
    QueryGateway,
    Row,
    any_of,
    eq,
    ilike,
    in_,
    neq,
)
from backoffice.multilingual import SUPPORTED_LOCALES, normalize_multilingual
from backoffice.services.compensation import CompensationLog
from backoffice.services.validation import coerce_date, coerce_datetime, validate_url

logger = structlog.get_logger(__name__)

READONLY_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class LinkSpec:
    """Many-to-many relation stored as (parent, child) rows in a junction table."""
    name: str
    junction: str
    parent_column: str
    child_column: str
    child_table: str
    label: str = "Item"


@dataclass(frozen=True)
class ReferenceSpec:
    """Foreign key that must point at an existing row."""
    field: str
    table: str
    message: str


@dataclass(frozen=True)
class UsageGuard:
    """Rows in ``table`` whose ``column`` equals our id block deletion."""
    table: str
    column: str
    message: str


@dataclass(frozen=True)
class ChildSpec:
    """Child rows removed together with the parent."""
    table: str
    parent_column: str
    asset_field: Optional[str] = None


@dataclass(frozen=True)
class AssetSpec:
    """Stored file referenced by a column."""
    folder: str
    image: bool = True
    allow_icon_class: bool = False


@dataclass
class ListResult:
    data: List[Row]
    count: int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise EntityValidationError(f"{field} must be a number", field=field) from None


def logged(action: str):
    """Log domain failures with the entity label before re-raising them unchanged."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except BackofficeError as e:
                logger.error(
                    f"Error {action} {self.label}",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

        return wrapper

    return decorator


class BaseService:
    """Validation, normalization and asset handling shared by all services."""

    table: str = ""
    label: str = "record"
    multilingual_fields: Tuple[str, ...] = ()
    url_fields: Dict[str, str] = {}
    date_fields: Tuple[str, ...] = ()
    datetime_fields: Tuple[str, ...] = ()
    asset_fields: Dict[str, AssetSpec] = {}
    references: Tuple[ReferenceSpec, ...] = ()

    def __init__(self, gateway: QueryGateway, storage: ObjectStorage) -> None:
        self.gateway = gateway
        self.storage = storage

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def writable_fields(self) -> frozenset:
        table = Base.metadata.tables[self.table]
        return frozenset(table.c.keys()) - READONLY_FIELDS

    def coerce_value(self, table: str, column: str, value: Any) -> Any:
        """Convert a query-string value to the column's Python type."""
        if not isinstance(value, str):
            return value
        try:
            python_type = Base.metadata.tables[table].c[column].type.python_type
        except (KeyError, NotImplementedError):
            return value
        if python_type is bool:
            return value.strip().lower() in ("1", "true", "yes")
        if python_type in (int, float):
            try:
                return python_type(value)
            except ValueError:
                raise EntityValidationError(f"{column} must be a number", field=column) from None
        return value

    def _check(self, response: GatewayResponse) -> GatewayResponse:
        return response.raise_for_error()

    async def _exists(self, table: str, row_id: Any) -> bool:
        response = self._check(
            await self.gateway.select(table, columns=["id"], filters=[eq("id", row_id)], range=(0, 0))
        )
        return response.first is not None

    async def _count(self, table: str, filters: Sequence[Predicate]) -> int:
        response = self._check(
            await self.gateway.select(table, columns=["id"], filters=filters, count=True)
        )
        return response.count or 0

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def prepare(self, data: Mapping[str, Any], existing: Optional[Row] = None) -> Row:
        """
        Normalize and validate a create/update payload.

        Raises ``EntityValidationError`` before any write happens.
        """
        if not isinstance(data, Mapping):
            raise EntityValidationError(f"{self.label} payload must be an object")

        allowed = self.writable_fields
        payload: Row = {}
        for key, value in data.items():
            if key in READONLY_FIELDS:
                continue
            if key not in allowed:
                raise EntityValidationError(f"Unknown field for {self.label}: {key}", field=key)
            payload[key] = value

        for name in self.multilingual_fields:
            if name in payload:
                payload[name] = normalize_multilingual(payload[name], name)
        for name in self.date_fields:
            if name in payload:
                payload[name] = coerce_date(payload[name], name)
        for name in self.datetime_fields:
            if name in payload:
                payload[name] = coerce_datetime(payload[name], name)
        for name, message in self.url_fields.items():
            if name in payload:
                validate_url(payload[name], message, field=name)
        for name, spec in self.asset_fields.items():
            value = payload.get(name)
            if spec.allow_icon_class and isinstance(value, str) and value:
                if not (is_icon_class(value) or value.startswith("/") or is_external_url(value)):
                    raise EntityValidationError(
                        "Invalid icon format. Must be a file or valid icon class.", field=name
                    )

        for ref in self.references:
            value = payload.get(ref.field)
            if value is not None and not await self._exists(ref.table, value):
                raise EntityValidationError(ref.message, field=ref.field)

        await self.validate(payload, existing)
        return payload

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        """Entity-specific rules. ``existing`` is None on create."""

    # ------------------------------------------------------------------
    # Stored assets
    # ------------------------------------------------------------------

    async def _store_assets(
        self,
        files: Optional[Mapping[str, UploadedFile]],
        log: CompensationLog,
    ) -> Row:
        stored: Row = {}
        for name, file in (files or {}).items():
            spec = self.asset_fields.get(name)
            if spec is None:
                raise EntityValidationError(f"{self.label} has no file field {name}", field=name)
            saver = save_image if spec.image else save_file
            path = await saver(self.storage, file, spec.folder)
            log.record(f"remove uploaded {path}", functools.partial(delete_file, self.storage, path))
            stored[name] = path
        return stored

    def _superseded_assets(self, existing: Optional[Row], payload: Row) -> List[str]:
        if not existing:
            return []
        paths = []
        for name in self.asset_fields:
            old = existing.get(name)
            if name in payload and old and payload[name] != old:
                paths.append(old)
        return paths

    def _asset_paths(self, row: Row) -> List[str]:
        return [row[name] for name in self.asset_fields if row.get(name)]

    async def remove_files_quietly(self, paths: Iterable[str]) -> None:
        """Best-effort removal: failures are logged, never raised."""
        for path in paths:
            if not path or is_icon_class(path) or is_external_url(path):
                continue
            try:
                await delete_file(self.storage, path)
            except StorageError as e:
                logger.warning("Failed to delete stored file", entity=self.label, path=path, error=str(e))


class EntityService(BaseService):
    """
    CRUD over one collection plus its junction links and child rows.

    ``filter_fields`` maps list-filter names to columns compared with ``eq``;
    ``link_filters`` maps a filter name to the link whose child id it matches.
    """

    search_fields: Tuple[str, ...] = ()
    plain_search_fields: Tuple[str, ...] = ()
    sortable: Tuple[str, ...] = ("created_at", "updated_at", "id")
    default_order: Tuple[Order, ...] = (Order("created_at", ascending=False),)
    filter_fields: Dict[str, str] = {}
    links: Tuple[LinkSpec, ...] = ()
    link_filters: Dict[str, str] = {}
    children: Tuple[ChildSpec, ...] = ()
    guards: Tuple[UsageGuard, ...] = ()
    detach_on_delete: Tuple[Tuple[str, str], ...] = ()
    default_values: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search_predicate(self, term: str) -> Optional[Predicate]:
        """OR across every locale of each multilingual search field."""
        pattern = f"%{term}%"
        filters = [
            ilike(name, pattern, key=locale)
            for name in self.search_fields
            for locale in SUPPORTED_LOCALES
        ]
        filters.extend(ilike(name, pattern) for name in self.plain_search_fields)
        return any_of(*filters) if filters else None

    async def build_filters(self, params: Mapping[str, Any]) -> Optional[List[Predicate]]:
        """Translate list parameters into predicates; ``None`` means "no rows can match"."""
        predicates: List[Predicate] = []

        search = params.get("search")
        if search:
            predicate = self.search_predicate(str(search))
            if predicate is not None:
                predicates.append(predicate)

        for name, column in self.filter_fields.items():
            value = params.get(name)
            if value is not None and value != "":
                predicates.append(eq(column, self.coerce_value(self.table, column, value)))

        for name, link_name in self.link_filters.items():
            value = params.get(name)
            if value is None or value == "":
                continue
            link = self._link(link_name)
            response = self._check(
                await self.gateway.select(
                    link.junction,
                    columns=[link.parent_column],
                    filters=[eq(link.child_column, self.coerce_value(link.junction, link.child_column, value))],
                )
            )
            parent_ids = sorted({row[link.parent_column] for row in response.data})
            if not parent_ids:
                return None
            predicates.append(in_("id", parent_ids))

        return predicates

    def build_order(self, params: Mapping[str, Any]) -> Tuple[Order, ...]:
        sort = params.get("sort")
        if sort and sort in self.sortable:
            return (Order(sort, ascending=params.get("order") == "asc"),)
        return self.default_order

    @staticmethod
    def build_range(params: Mapping[str, Any]) -> Optional[Tuple[int, int]]:
        limit = params.get("limit")
        if not limit:
            return None
        limit = max(1, _as_int(limit, "limit"))
        page = max(1, _as_int(params.get("page") or 1, "page"))
        start = (page - 1) * limit
        return start, start + limit - 1

    @logged("fetching")
    async def get_all(self, filters: Optional[Mapping[str, Any]] = None) -> ListResult:
        """
        Filtered, sorted and optionally paginated listing.

        Args:
            filters: ``search``, ``sort``, ``order`` (asc/desc), ``page``,
                ``limit`` plus the entity's own filter names

        Returns:
            ListResult: Matching rows and the total count before pagination
        """
        params = dict(filters or {})
        predicates = await self.build_filters(params)
        if predicates is None:
            return ListResult(data=[], count=0)

        response = self._check(
            await self.gateway.select(
                self.table,
                filters=predicates,
                order=self.build_order(params),
                range=self.build_range(params),
                count=True,
            )
        )
        return ListResult(data=response.data, count=response.count or 0)

    @logged("fetching")
    async def get_by_id(self, entity_id: Any, with_relations: bool = False) -> Optional[Row]:
        response = self._check(
            await self.gateway.select(self.table, filters=[eq("id", entity_id)], range=(0, 0))
        )
        row = response.first
        if row is not None and with_relations:
            for link in self.links:
                row[link.name] = await self.get_links(entity_id, link.name)
        return row

    async def require(self, entity_id: Any) -> Row:
        row = await self.get_by_id(entity_id)
        if row is None:
            raise EntityNotFoundError(f"{self.label.capitalize()} not found")
        return row

    # ------------------------------------------------------------------
    # Junction links
    # ------------------------------------------------------------------

    def _link(self, name: str) -> LinkSpec:
        for link in self.links:
            if link.name == name:
                return link
        raise EntityValidationError(f"{self.label} has no relation {name}", field=name)

    async def get_links(self, parent_id: Any, name: str) -> List[Any]:
        link = self._link(name)
        response = self._check(
            await self.gateway.select(
                link.junction,
                columns=[link.child_column],
                filters=[eq(link.parent_column, parent_id)],
            )
        )
        return sorted({row[link.child_column] for row in response.data})

    async def _validate_links(self, related_ids: Optional[Mapping[str, Sequence[Any]]]) -> Dict[str, List[Any]]:
        resolved: Dict[str, List[Any]] = {}
        for name, child_ids in (related_ids or {}).items():
            link = self._link(name)
            unique_ids = list(dict.fromkeys(child_ids or []))
            if unique_ids:
                response = self._check(
                    await self.gateway.select(
                        link.child_table, columns=["id"], filters=[in_("id", unique_ids)]
                    )
                )
                found = {row["id"] for row in response.data}
                missing = [child_id for child_id in unique_ids if child_id not in found]
                if missing:
                    raise EntityValidationError(
                        f"{link.label} with id {missing[0]} does not exist", field=name
                    )
            resolved[name] = unique_ids
        return resolved

    async def _write_links(self, link: LinkSpec, parent_id: Any, child_ids: Sequence[Any]) -> None:
        self._check(await self.gateway.delete(link.junction, [eq(link.parent_column, parent_id)]))
        if child_ids:
            rows = [{link.parent_column: parent_id, link.child_column: child_id} for child_id in child_ids]
            self._check(await self.gateway.insert(link.junction, rows))

    async def _replace_links(
        self,
        link: LinkSpec,
        parent_id: Any,
        child_ids: Sequence[Any],
        log: CompensationLog,
    ) -> None:
        previous = await self.get_links(parent_id, link.name)
        log.record(
            f"restore {link.junction} for {parent_id}",
            functools.partial(self._write_links, link, parent_id, previous),
        )
        await self._write_links(link, parent_id, child_ids)

    @logged("linking")
    async def replace_links(self, parent_id: Any, name: str, child_ids: Sequence[Any]) -> List[Any]:
        """
        Replace the whole link set of one relation.

        Delete-by-parent then insert; a failed insert restores the previous
        set. Duplicate child ids are collapsed.
        """
        resolved = await self._validate_links({name: child_ids})
        async with CompensationLog(f"replace {self._link(name).junction}") as log:
            await self._replace_links(self._link(name), parent_id, resolved[name], log)
        return resolved[name]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _delete_row(self, entity_id: Any) -> None:
        self._check(await self.gateway.delete(self.table, [eq("id", entity_id)]))

    async def _restore_row(self, entity_id: Any, values: Row) -> None:
        self._check(await self.gateway.update(self.table, values, [eq("id", entity_id)]))

    async def _insert(self, payload: Row, log: CompensationLog) -> Row:
        row = self._check(await self.gateway.insert(self.table, payload)).first
        if row is None:
            raise EntityNotFoundError(f"{self.label.capitalize()} was not created")
        log.record(f"delete {self.table} {row['id']}", functools.partial(self._delete_row, row["id"]))
        return row

    @logged("creating")
    async def create(
        self,
        data: Mapping[str, Any],
        related_ids: Optional[Mapping[str, Sequence[Any]]] = None,
        files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> Row:
        """
        Insert a row, then its junction links and uploaded files.

        Args:
            data: Column values
            related_ids: Child id lists keyed by relation name
            files: Uploads keyed by asset field

        Returns:
            Row: The stored row
        """
        payload = await self.prepare({**self.default_values, **dict(data)})
        links = await self._validate_links(related_ids)

        async with CompensationLog(f"create {self.table}") as log:
            payload.update(await self._store_assets(files, log))
            now = utcnow()
            payload.setdefault("created_at", now)
            payload.setdefault("updated_at", now)
            row = await self._insert(payload, log)
            for name, child_ids in links.items():
                await self._replace_links(self._link(name), row["id"], child_ids, log)

        logger.info(f"Created {self.label}", id=row["id"])
        return row

    @logged("updating")
    async def update(
        self,
        entity_id: Any,
        data: Mapping[str, Any],
        related_ids: Optional[Mapping[str, Sequence[Any]]] = None,
        files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> Row:
        """Partial update; superseded files are removed only after the write succeeds."""
        existing = await self.require(entity_id)
        payload = await self.prepare(data, existing)
        links = await self._validate_links(related_ids)

        async with CompensationLog(f"update {self.table}") as log:
            payload.update(await self._store_assets(files, log))
            payload["updated_at"] = utcnow()
            row = self._check(
                await self.gateway.update(self.table, payload, [eq("id", entity_id)])
            ).first
            if row is None:
                raise EntityNotFoundError(f"{self.label.capitalize()} not found")
            restore = {key: existing.get(key) for key in payload}
            log.record(f"restore {self.table} {entity_id}", functools.partial(self._restore_row, entity_id, restore))
            for name, child_ids in links.items():
                await self._replace_links(self._link(name), entity_id, child_ids, log)

        await self.remove_files_quietly(self._superseded_assets(existing, payload))
        logger.info(f"Updated {self.label}", id=entity_id)
        return row

    async def check_usage(self, entity_id: Any) -> None:
        for guard in self.guards:
            if await self._count(guard.table, [eq(guard.column, entity_id)]) > 0:
                raise ReferenceInUseError(guard.message)

    @logged("deleting")
    async def delete(self, entity_id: Any) -> None:
        """
        Delete a row with its junction links, child rows and stored files.

        Link and child rows go first, then the parent row. File removal is
        best-effort and never blocks the delete.
        """
        existing = await self.require(entity_id)
        await self.check_usage(entity_id)

        paths = self._asset_paths(existing)
        for link in self.links:
            self._check(await self.gateway.delete(link.junction, [eq(link.parent_column, entity_id)]))
        for junction, column in self.detach_on_delete:
            self._check(await self.gateway.delete(junction, [eq(column, entity_id)]))
        for child in self.children:
            removed = self._check(
                await self.gateway.delete(child.table, [eq(child.parent_column, entity_id)])
            )
            if child.asset_field:
                paths.extend(row[child.asset_field] for row in removed.data if row.get(child.asset_field))

        self._check(await self.gateway.delete(self.table, [eq("id", entity_id)]))
        await self.remove_files_quietly(paths)
        logger.info(f"Deleted {self.label}", id=entity_id, files=len(paths))

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    @logged("bulk creating")
    async def bulk_create(self, items: Sequence[Mapping[str, Any]]) -> List[Row]:
        """All payloads are validated before the first insert; a failed insert undoes the batch."""
        payloads = [await self.prepare({**self.default_values, **dict(item)}) for item in items]
        rows: List[Row] = []
        async with CompensationLog(f"bulk create {self.table}") as log:
            now = utcnow()
            for payload in payloads:
                payload.setdefault("created_at", now)
                payload.setdefault("updated_at", now)
                rows.append(await self._insert(payload, log))
        return rows

    @logged("bulk updating")
    async def bulk_update(self, updates: Sequence[Mapping[str, Any]]) -> List[Row]:
        """``updates`` is a list of ``{"id": ..., "data": {...}}``; applied in order."""
        return [await self.update(item["id"], item.get("data") or {}) for item in updates]

    @logged("bulk deleting")
    async def bulk_delete(self, ids: Sequence[Any]) -> int:
        for entity_id in ids:
            await self.delete(entity_id)
        return len(ids)

    async def slug_taken(self, slug: str, exclude_id: Any = None) -> bool:
        filters: List[Predicate] = [eq("slug", slug)]
        if exclude_id is not None:
            filters.append(neq("id", exclude_id))
        return await self._count(self.table, filters) > 0


class SingletonService(BaseService):
    """
    One-row page content: ``get`` returns the row (or None) and ``save``
    updates it when present, inserts otherwise.
    """

    @logged("fetching")
    async def get(self) -> Optional[Row]:
        response = self._check(
            await self.gateway.select(self.table, order=[Order("id", ascending=True)], range=(0, 0))
        )
        return response.first

    @logged("saving")
    async def save(
        self,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, UploadedFile]] = None,
    ) -> Row:
        existing = await self.get()
        payload = await self.prepare(data, existing)

        async with CompensationLog(f"save {self.table}") as log:
            payload.update(await self._store_assets(files, log))
            now = utcnow()
            payload["updated_at"] = now
            if existing is None:
                payload["created_at"] = now
                row = self._check(await self.gateway.insert(self.table, payload)).first
            else:
                row = self._check(
                    await self.gateway.update(self.table, payload, [eq("id", existing["id"])])
                ).first
            if row is None:
                raise EntityNotFoundError(f"{self.label.capitalize()} was not saved")

        await self.remove_files_quietly(self._superseded_assets(existing, payload))
        logger.info(f"Saved {self.label}", id=row["id"])
        return row
