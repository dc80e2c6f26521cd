# search_select/profiles.py
"""
Concrete selector configurations.

A SearchProfile is everything that differs between the student, class and
branch selectors: where to search, which columns to match, how scope ids
map to columns, fixed filters, the optional avatar enrichment, and the
user-facing texts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Tuple

from search_select.models import ACTIVE_STATUS, Candidate, Eq, FilterSet, SearchScope

RowMapper = Callable[[Mapping[str, Any]], Candidate]


@dataclass(frozen=True)
class ScopeHierarchy:
    """How a coarse (fallback) scope fans out into the fine scopes used as filter."""
    child_collection: str
    child_id_column: str
    parent_column: str
    status_column: Optional[str] = "status"
    active_status: Any = ACTIVE_STATUS


@dataclass(frozen=True)
class Enrichment:
    """One batched lookup filling Candidate.image_ref from another collection."""
    collection: str
    id_column: str
    value_column: str
    row_key: str  # column of the search row holding the lookup id


@dataclass(frozen=True)
class ProfileTexts:
    noun: str  # plural, e.g. "students"
    placeholder: str
    no_context_placeholder: str
    no_context_helper: str
    query_error: str

    def helper(self, min_length: int) -> str:
        return f"Start typing to search {self.noun} (minimum {min_length} characters)"

    def no_matches(self, term: str) -> str:
        return f'No {self.noun} found matching "{term}"'

    def too_short(self, min_length: int) -> str:
        return f"Type at least {min_length} characters to search"


@dataclass(frozen=True)
class SearchProfile:
    name: str
    label: str
    collection: str
    columns: Tuple[str, ...]
    search_columns: Tuple[str, str]
    scope_column: str
    to_candidate: RowMapper
    texts: ProfileTexts
    hierarchy: Optional[ScopeHierarchy] = None
    narrowing_column: Optional[str] = None
    static_filters: FilterSet = field(default_factory=FilterSet)
    enrichment: Optional[Enrichment] = None
    # which caller-supplied ids act as primary and fallback scope
    primary_prop: str = "branch_id"
    fallback_prop: Optional[str] = "coaching_center_id"

    def with_static_filters(self, filters: FilterSet) -> "SearchProfile":
        return replace(self, static_filters=filters)

    def scope_for(
        self,
        branch_id: Optional[str] = None,
        coaching_center_id: Optional[str] = None,
        class_id: Optional[str] = None,
    ) -> SearchScope:
        ids = {"branch_id": branch_id, "coaching_center_id": coaching_center_id}
        return SearchScope(
            primary_scope_id=ids.get(self.primary_prop),
            fallback_scope_id=ids.get(self.fallback_prop) if self.fallback_prop else None,
            narrowing_id=class_id if self.narrowing_column else None,
        )


# ============================================================================
# ROW MAPPERS
# ============================================================================

def _student_candidate(row: Mapping[str, Any]) -> Candidate:
    username = row.get("student_username")
    return Candidate(
        id=str(row["enrollment_id"]),
        display_name=row.get("student_name") or "Unknown Student",
        secondary_label=f"@{username}" if username else None,
        scope_label=row.get("branch_name"),
        auxiliary_badge=row.get("class_name") or row.get("enrollment_status"),
        image_ref=row.get("avatar_url"),
        raw=dict(row),
    )


def _class_candidate(row: Mapping[str, Any]) -> Candidate:
    current, maximum = row.get("current_enrollment"), row.get("max_students")
    detail = f"{current or 0}/{maximum} students" if maximum is not None else None
    return Candidate(
        id=str(row["id"]),
        display_name=row.get("class_name") or "Untitled class",
        secondary_label=row.get("subject"),
        scope_label=row.get("branch_name"),
        auxiliary_badge=row.get("grade_level"),
        detail=detail,
        raw=dict(row),
    )


def _branch_candidate(row: Mapping[str, Any]) -> Candidate:
    return Candidate(
        id=str(row["id"]),
        display_name=row.get("name") or "Unnamed branch",
        secondary_label=row.get("description"),
        scope_label=row.get("coaching_center_name"),
        auxiliary_badge="Main branch" if row.get("is_main_branch") else None,
        raw=dict(row),
    )


# ============================================================================
# PROFILES
# ============================================================================

ACTIVE_BRANCHES = ScopeHierarchy(
    child_collection="coaching_branches",
    child_id_column="id",
    parent_column="coaching_center_id",
)

ENROLLED_ONLY = FilterSet((Eq("enrollment_status", "ENROLLED"),))

STUDENT_SEARCH = SearchProfile(
    name="student",
    label="Student",
    collection="student_enrollment_details",
    columns=(
        "enrollment_id", "student_id", "student_name", "student_username",
        "branch_id", "branch_name", "coaching_center_name",
        "class_id", "class_name", "subject", "enrollment_status",
    ),
    search_columns=("student_username", "student_name"),
    scope_column="branch_id",
    hierarchy=ACTIVE_BRANCHES,
    narrowing_column="class_id",
    static_filters=ENROLLED_ONLY,
    enrichment=Enrichment(
        collection="profiles",
        id_column="id",
        value_column="avatar_url",
        row_key="student_id",
    ),
    to_candidate=_student_candidate,
    texts=ProfileTexts(
        noun="students",
        placeholder="Search by username or name...",
        no_context_placeholder="Select a branch or coaching center first",
        no_context_helper="Please select a branch first to search for students",
        query_error="Failed to search students",
    ),
)

CLASS_SEARCH = SearchProfile(
    name="class",
    label="Class",
    collection="branch_class_details",
    columns=(
        "id", "branch_id", "class_name", "subject", "grade_level", "batch_name",
        "max_students", "current_enrollment", "status", "branch_name",
    ),
    search_columns=("class_name", "subject"),
    scope_column="branch_id",
    hierarchy=ACTIVE_BRANCHES,
    static_filters=FilterSet((Eq("status", ACTIVE_STATUS), Eq("is_visible", 1))),
    to_candidate=_class_candidate,
    texts=ProfileTexts(
        noun="classes",
        placeholder="Search for a class by name or subject",
        no_context_placeholder="Select a branch first",
        no_context_helper="Please select a branch first to search for classes",
        query_error="Failed to search classes",
    ),
)

BRANCH_SEARCH = SearchProfile(
    name="branch",
    label="Branch",
    collection="coaching_branch_details",
    columns=("id", "coaching_center_id", "name", "description", "is_main_branch", "status", "coaching_center_name"),
    search_columns=("name", "description"),
    scope_column="coaching_center_id",
    primary_prop="coaching_center_id",
    fallback_prop=None,
    static_filters=FilterSet((Eq("status", ACTIVE_STATUS),)),
    to_candidate=_branch_candidate,
    texts=ProfileTexts(
        noun="branches",
        placeholder="Search for your branch by name",
        no_context_placeholder="Select a coaching center first",
        no_context_helper="Please select a coaching center first to search for branches",
        query_error="Failed to search branches",
    ),
)

PROFILES = {p.name: p for p in (STUDENT_SEARCH, CLASS_SEARCH, BRANCH_SEARCH)}


def get_profile(name: str) -> SearchProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown search profile {name!r}; expected one of {sorted(PROFILES)}") from None


def student_profile(enrolled_only: bool = True) -> SearchProfile:
    """Student search, optionally including dropped/completed enrollments."""
    return STUDENT_SEARCH if enrolled_only else STUDENT_SEARCH.with_static_filters(FilterSet())
