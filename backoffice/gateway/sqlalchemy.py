"""
SQLAlchemy-backed Query Gateway.

Translates gateway predicates into SQL over the tables registered on the
declarative metadata. Each call runs in its own short transaction, so a
single insert/update/delete is atomic while multi-call sequences are not.
"""

from typing import List, Optional, Sequence, Tuple, Union

import structlog
from sqlalchemy import Table, and_, delete, func, insert, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from backoffice.database.models import Base
from backoffice.errors import GatewayError
from backoffice.gateway.base import AnyOf, Filter, GatewayResponse, Order, Predicate, Row

logger = structlog.get_logger(__name__)


class SQLAlchemyGateway:
    """Gateway over an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], metadata=None) -> None:
        self._session_factory = session_factory
        self._metadata = metadata if metadata is not None else Base.metadata

    def _table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise GatewayError(f"Unknown table: {name}", code="unknown_table")
        return table

    def _column(self, table: Table, flt: Filter):
        if flt.column not in table.c:
            raise GatewayError(
                f"Unknown column {flt.column} on {table.name}", code="unknown_column"
            )
        column = table.c[flt.column]
        if flt.key is not None:
            return column[flt.key].as_string()
        return column

    def _predicate(self, table: Table, predicate: Predicate) -> ColumnElement:
        if isinstance(predicate, AnyOf):
            return or_(*[self._predicate(table, item) for item in predicate.filters])

        column = self._column(table, predicate)
        op, value = predicate.op, predicate.value
        if op == "eq":
            return column == value
        if op == "neq":
            return column != value
        if op == "gt":
            return column > value
        if op == "gte":
            return column >= value
        if op == "lt":
            return column < value
        if op == "lte":
            return column <= value
        if op == "in":
            return column.in_(list(value))
        if op == "ilike":
            return column.ilike(value)
        if op == "is_null":
            return column.is_(None)
        return column.is_not(None)

    def _where(self, table: Table, predicates: Sequence[Predicate]) -> Optional[ColumnElement]:
        clauses = [self._predicate(table, item) for item in predicates]
        return and_(*clauses) if clauses else None

    async def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Sequence[Predicate] = (),
        order: Sequence[Order] = (),
        range: Optional[Tuple[int, int]] = None,
        count: bool = False,
    ) -> GatewayResponse:
        try:
            tbl = self._table(table)
            selected = [tbl.c[name] for name in columns] if columns else [tbl]
            stmt = select(*selected)
            where = self._where(tbl, filters)
            if where is not None:
                stmt = stmt.where(where)
            for item in order:
                column = tbl.c[item.column]
                stmt = stmt.order_by(column.asc() if item.ascending else column.desc())
            if range is not None:
                start, end = range
                stmt = stmt.offset(start).limit(max(0, end - start + 1))

            async with self._session_factory() as session:
                result = await session.execute(stmt)
                data = [dict(row._mapping) for row in result]
                total = None
                if count:
                    count_stmt = select(func.count()).select_from(tbl)
                    if where is not None:
                        count_stmt = count_stmt.where(where)
                    total = (await session.execute(count_stmt)).scalar() or 0
            return GatewayResponse(data=data, count=total)
        except GatewayError as e:
            return GatewayResponse(error=e)
        except (SQLAlchemyError, KeyError) as e:
            logger.error("Gateway select failed", table=table, error=str(e))
            return GatewayResponse(error=GatewayError(str(e), code=type(e).__name__))

    async def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> GatewayResponse:
        batch: List[Row] = [rows] if isinstance(rows, dict) else list(rows)
        if not batch:
            return GatewayResponse(data=[], count=0)
        try:
            tbl = self._table(table)
            async with self._session_factory() as session:
                async with session.begin():
                    data = []
                    # rows may carry different key sets
                    for row in batch:
                        result = await session.execute(insert(tbl).values(**row).returning(*tbl.c))
                        data.extend(dict(item._mapping) for item in result)
            return GatewayResponse(data=data, count=len(data))
        except GatewayError as e:
            return GatewayResponse(error=e)
        except SQLAlchemyError as e:
            logger.error("Gateway insert failed", table=table, error=str(e))
            return GatewayResponse(error=GatewayError(str(e), code=type(e).__name__))

    async def update(self, table: str, values: Row, match: Sequence[Predicate]) -> GatewayResponse:
        try:
            tbl = self._table(table)
            stmt = update(tbl).values(**values).returning(*tbl.c)
            where = self._where(tbl, match)
            if where is not None:
                stmt = stmt.where(where)
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    data = [dict(row._mapping) for row in result]
            return GatewayResponse(data=data, count=len(data))
        except GatewayError as e:
            return GatewayResponse(error=e)
        except SQLAlchemyError as e:
            logger.error("Gateway update failed", table=table, error=str(e))
            return GatewayResponse(error=GatewayError(str(e), code=type(e).__name__))

    async def delete(self, table: str, match: Sequence[Predicate]) -> GatewayResponse:
        try:
            tbl = self._table(table)
            stmt = delete(tbl).returning(*tbl.c)
            where = self._where(tbl, match)
            if where is not None:
                stmt = stmt.where(where)
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    data = [dict(row._mapping) for row in result]
            return GatewayResponse(data=data, count=len(data))
        except GatewayError as e:
            return GatewayResponse(error=e)
        except SQLAlchemyError as e:
            logger.error("Gateway delete failed", table=table, error=str(e))
            return GatewayResponse(error=GatewayError(str(e), code=type(e).__name__))

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Gateway ping failed", error=str(e))
            return False
