# search_select/executor.py
"""
Remote query executor.

Runs the scoped, term-filtered lookup and normalizes rows into Candidates.
Matching is a case-insensitive substring match on the profile's two search
columns, ORed. Result order is not guaranteed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List

from search_select.backend import QueryBackend
from search_select.errors import QueryError
from search_select.models import DEFAULT_RESULT_LIMIT, AnyILike, Candidate, FilterSet
from search_select.profiles import SearchProfile

logger = logging.getLogger(__name__)


class QueryExecutor:
    def __init__(self, backend: QueryBackend, profile: SearchProfile):
        self.backend = backend
        self.profile = profile

    def build_filters(self, term: str, scope_filters: FilterSet) -> FilterSet:
        profile = self.profile
        return (
            scope_filters
            .merge(profile.static_filters)
            .and_(AnyILike(profile.search_columns, term))
        )

    async def execute(
        self,
        term: str,
        scope_filters: FilterSet,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> List[Candidate]:
        """
        Fetch at most `limit` candidates matching `term` inside `scope_filters`.
        Raises QueryError with a user-facing message on backend failure.
        """
        profile = self.profile
        filters = self.build_filters(term, scope_filters)
        try:
            rows = await self.backend.select(profile.collection, profile.columns, filters, limit)
        except Exception as e:
            logger.error("%s search for %r failed", profile.name, term, exc_info=True)
            raise QueryError(profile.texts.query_error) from e

        try:
            candidates = [profile.to_candidate(r) for r in rows]
        except Exception as e:
            logger.error("Could not normalize %s rows", profile.name, exc_info=True)
            raise QueryError(profile.texts.query_error) from e

        if profile.enrichment and candidates:
            candidates = await self._enrich(candidates)
        return candidates

    async def _enrich(self, candidates: List[Candidate]) -> List[Candidate]:
        """One batched lookup for all candidates; anything missing stays None."""
        enrichment = self.profile.enrichment
        keys = [c.raw.get(enrichment.row_key) for c in candidates]
        try:
            rows = await self.backend.fetch_by_ids(
                enrichment.collection,
                (enrichment.id_column, enrichment.value_column),
                enrichment.id_column,
                [k for k in keys if k is not None],
            )
        except Exception:
            logger.warning(
                "Enrichment lookup on %s failed; continuing without %s",
                enrichment.collection, enrichment.value_column, exc_info=True,
            )
            rows = []

        values: Dict[Any, Any] = {r[enrichment.id_column]: r.get(enrichment.value_column) for r in rows}
        return [replace(c, image_ref=values.get(k) or None) for c, k in zip(candidates, keys)]
