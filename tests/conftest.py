"""Shared fixtures: a seeded in-memory database and a recording fake backend."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from core import schema_registry
from core.db import get_engine, init_db
from search_select import AnyILike, FilterSet, SqlQueryBackend


@dataclass
class SelectCall:
    collection: str
    columns: Tuple[str, ...]
    filters: FilterSet
    limit: Optional[int]
    term: Optional[str]


def search_term(filters: FilterSet) -> Optional[str]:
    for clause in filters:
        if isinstance(clause, AnyILike):
            return clause.term
    return None


class RecordingBackend:
    """
    In-memory QueryBackend that records every call.

    - tables: collection -> rows returned by select()/fetch_by_ids()
    - by_term: search term -> rows, overriding `tables` for term searches
    - delays: search term -> seconds to sleep before answering
    - errors: collection -> exception raised for any call on it
    """

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        by_term: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        delays: Optional[Dict[str, float]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ):
        self.tables = tables or {}
        self.by_term = by_term or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.select_calls: List[SelectCall] = []
        self.fetch_calls: List[Tuple[str, Tuple[str, ...], str, List[Any]]] = []

    @property
    def searched_terms(self) -> List[str]:
        return [c.term for c in self.select_calls if c.term is not None]

    async def select(self, collection, columns, filters, limit=None):
        term = search_term(filters)
        self.select_calls.append(SelectCall(collection, tuple(columns), filters, limit, term))
        delay = self.delays.get(term)
        if delay:
            await asyncio.sleep(delay)
        if collection in self.errors:
            raise self.errors[collection]
        if term is not None and term in self.by_term:
            rows = self.by_term[term]
        else:
            rows = self.tables.get(collection, [])
        rows = [dict(r) for r in rows]
        return rows[:limit] if limit is not None else rows

    async def fetch_by_ids(self, collection, columns, id_column, ids: Sequence[Any]):
        self.fetch_calls.append((collection, tuple(columns), id_column, list(ids)))
        if collection in self.errors:
            raise self.errors[collection]
        wanted = set(ids)
        return [dict(r) for r in self.tables.get(collection, []) if r.get(id_column) in wanted]


def student_row(enrollment_id: str, student_id: str, name: str, username: str, **extra) -> Dict[str, Any]:
    row = {
        "enrollment_id": enrollment_id,
        "student_id": student_id,
        "student_name": name,
        "student_username": username,
        "branch_id": "B1",
        "branch_name": "Bright Minds North",
        "class_id": "K1",
        "class_name": "Maths Foundation",
        "enrollment_status": "ENROLLED",
    }
    row.update(extra)
    return row


@pytest.fixture
def registry_snapshot():
    """Restores the schema registry after tests that register installers."""
    saved = list(schema_registry._REGISTRY)
    yield
    schema_registry._REGISTRY[:] = saved


@pytest.fixture
def engine():
    eng = get_engine("sqlite://")
    failed = init_db(eng)
    assert failed == []
    yield eng
    eng.dispose()


@pytest.fixture
def sql_backend(engine):
    return SqlQueryBackend(engine)


@pytest.fixture
def fake_backend():
    return RecordingBackend()
