# search_select/backend.py
"""
Backend query surface used by the resolver and executor.

Two operation shapes only:
- select(collection, columns, filters, limit): filtered lookup on one collection
- fetch_by_ids(collection, columns, id_column, ids): batched lookup by id list

SqlQueryBackend implements them on a SQLAlchemy engine with text() queries.
Row order is whatever the database returns; no ORDER BY is applied.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from sqlalchemy import bindparam, text as sa_text
from sqlalchemy.engine import Connection, Engine

from search_select.models import AnyILike, Eq, FilterSet, In

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
LIKE_ESCAPE = "\\"


@runtime_checkable
class QueryBackend(Protocol):
    async def select(
        self,
        collection: str,
        columns: Sequence[str],
        filters: FilterSet,
        limit: Optional[int] = None,
    ) -> List[Row]:
        ...

    async def fetch_by_ids(
        self,
        collection: str,
        columns: Sequence[str],
        id_column: str,
        ids: Sequence[Any],
    ) -> List[Row]:
        ...


# -----------------------------
# SQL helpers
# -----------------------------


def _ident(name: str) -> str:
    """Collection/column names are interpolated, so only plain identifiers pass."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def compile_filters(filters: FilterSet) -> Tuple[str, Dict[str, Any], List[str]]:
    """
    Turn a FilterSet into (where_sql, params, expanding_param_names).

    Equality and membership bind values; AnyILike becomes an OR group of
    lower(col) LIKE lower(:p) ESCAPE '\\'.
    """
    where: List[str] = []
    params: Dict[str, Any] = {}
    expanding: List[str] = []

    for i, clause in enumerate(filters):
        key = f"p{i}"
        if isinstance(clause, Eq):
            where.append(f"{_ident(clause.column)} = :{key}")
            params[key] = clause.value
        elif isinstance(clause, In):
            if not clause.values:
                # membership in nothing matches nothing
                where.append("1 = 0")
                continue
            where.append(f"{_ident(clause.column)} IN :{key}")
            params[key] = list(clause.values)
            expanding.append(key)
        elif isinstance(clause, AnyILike):
            if not clause.columns:
                raise ValueError("AnyILike needs at least one column")
            params[key] = f"%{escape_like(clause.term)}%"
            ors = [
                f"lower({_ident(col)}) LIKE lower(:{key}) ESCAPE '{LIKE_ESCAPE}'"
                for col in clause.columns
            ]
            where.append("(" + " OR ".join(ors) + ")")
        else:
            raise TypeError(f"Unsupported filter clause: {clause!r}")

    return (" AND ".join(where) if where else "1=1"), params, expanding


def _fetch_all(conn: Connection, sql: str, params: Dict[str, Any], expanding: Sequence[str]) -> List[Row]:
    stmt = sa_text(sql)
    if expanding:
        stmt = stmt.bindparams(*[bindparam(name, expanding=True) for name in expanding])
    rows = conn.execute(stmt, params).fetchall()
    return [dict(r._mapping) for r in rows]


class SqlQueryBackend:
    """QueryBackend on a SQLAlchemy engine; blocking calls run in a worker thread."""

    def __init__(self, engine: Engine):
        self.engine = engine

    # ---- sync implementations -------------------------------------------

    def select_sync(
        self,
        collection: str,
        columns: Sequence[str],
        filters: FilterSet,
        limit: Optional[int] = None,
    ) -> List[Row]:
        cols = ", ".join(_ident(c) for c in columns) if columns else "*"
        where_sql, params, expanding = compile_filters(filters)
        sql = f"SELECT {cols} FROM {_ident(collection)} WHERE {where_sql}"
        if limit is not None:
            sql += " LIMIT :_limit"
            params["_limit"] = int(limit)
        logger.debug("select %s where %s params=%s", collection, where_sql, params)
        with self.engine.connect() as conn:
            return _fetch_all(conn, sql, params, expanding)

    def fetch_by_ids_sync(
        self,
        collection: str,
        columns: Sequence[str],
        id_column: str,
        ids: Sequence[Any],
    ) -> List[Row]:
        unique_ids = list(dict.fromkeys(i for i in ids if i is not None))
        if not unique_ids:
            return []
        wanted = list(columns)
        if id_column not in wanted:
            wanted.insert(0, id_column)
        return self.select_sync(collection, wanted, FilterSet((In(id_column, unique_ids),)))

    # ---- QueryBackend ----------------------------------------------------

    async def select(
        self,
        collection: str,
        columns: Sequence[str],
        filters: FilterSet,
        limit: Optional[int] = None,
    ) -> List[Row]:
        return await asyncio.to_thread(self.select_sync, collection, columns, filters, limit)

    async def fetch_by_ids(
        self,
        collection: str,
        columns: Sequence[str],
        id_column: str,
        ids: Sequence[Any],
    ) -> List[Row]:
        return await asyncio.to_thread(self.fetch_by_ids_sync, collection, columns, id_column, ids)
