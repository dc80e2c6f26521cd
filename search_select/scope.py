# search_select/scope.py
"""
Scope resolution: turn (branch, coaching center, class) ids into a FilterSet.

A branch id filters directly. A coaching center id alone needs one fan-out
lookup of its active branches; if there are none the search yields nothing
instead of running unscoped.
"""

from __future__ import annotations

import logging
from typing import Optional

from search_select.backend import QueryBackend
from search_select.errors import NoContextError, QueryError
from search_select.models import Eq, FilterSet, In, SearchScope
from search_select.profiles import SearchProfile

logger = logging.getLogger(__name__)


class ScopeResolver:
    def __init__(self, backend: QueryBackend, profile: SearchProfile):
        self.backend = backend
        self.profile = profile

    def has_context(self, scope: SearchScope) -> bool:
        if not scope.has_context:
            return False
        # a fallback id alone is only usable when the profile can fan it out
        return bool(scope.primary_scope_id) or self.profile.hierarchy is not None

    async def resolve(self, scope: SearchScope) -> Optional[FilterSet]:
        """
        Returns the scope filter, or None when the fallback scope has no
        active children (a valid empty result, not an error).

        Raises NoContextError when no usable scope id is present and
        QueryError when the fan-out lookup fails.
        """
        if not self.has_context(scope):
            raise NoContextError()

        profile = self.profile
        if scope.primary_scope_id:
            filters = FilterSet((Eq(profile.scope_column, scope.primary_scope_id),))
        else:
            child_ids = await self._child_scope_ids(scope.fallback_scope_id)
            if not child_ids:
                logger.debug(
                    "No active %s under %s; short-circuiting %s search",
                    profile.hierarchy.child_collection, scope.fallback_scope_id, profile.name,
                )
                return None
            filters = FilterSet((In(profile.scope_column, child_ids),))

        if scope.narrowing_id and profile.narrowing_column:
            filters = filters.and_(Eq(profile.narrowing_column, scope.narrowing_id))
        return filters

    async def _child_scope_ids(self, parent_id: str) -> tuple:
        hierarchy = self.profile.hierarchy
        filters = FilterSet((Eq(hierarchy.parent_column, parent_id),))
        if hierarchy.status_column:
            filters = filters.and_(Eq(hierarchy.status_column, hierarchy.active_status))
        try:
            rows = await self.backend.select(
                hierarchy.child_collection, (hierarchy.child_id_column,), filters
            )
        except Exception as e:
            logger.error("Fan-out lookup on %s failed", hierarchy.child_collection, exc_info=True)
            raise QueryError(self.profile.texts.query_error) from e
        return tuple(r[hierarchy.child_id_column] for r in rows)
