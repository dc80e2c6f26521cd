# search_select/models.py
"""
Data models for the search-and-select components.
Contains enums, filter clauses, and the immutable value objects passed
between the resolver, executor and controller.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union


DEFAULT_DEBOUNCE_MS = 300
DEFAULT_MIN_QUERY_LENGTH = 2
DEFAULT_RESULT_LIMIT = 10
ACTIVE_STATUS = "ACTIVE"


# ============================================================================
# ENUMS
# ============================================================================

class SelectionState(str, Enum):
    """Lifecycle of one selector instance."""
    IDLE = "idle"
    TYPING = "typing"
    SEARCHING = "searching"
    RESULTS_SHOWN = "results_shown"
    SELECTED = "selected"
    ERROR = "error"


class SelectionEvent(str, Enum):
    """Inputs that drive the selection state machine."""
    INPUT = "input"
    TERM_TOO_SHORT = "term_too_short"
    DEBOUNCE_FIRED = "debounce_fired"
    QUERY_SUCCEEDED = "query_succeeded"
    QUERY_FAILED = "query_failed"
    SELECT = "select"
    CLEAR = "clear"
    DISMISS = "dismiss"
    FOCUS = "focus"


# ============================================================================
# SCOPE
# ============================================================================

@dataclass(frozen=True)
class SearchScope:
    """Filtering context: branch (primary), coaching center (fallback), class (narrowing)."""
    primary_scope_id: Optional[str] = None
    fallback_scope_id: Optional[str] = None
    narrowing_id: Optional[str] = None

    @property
    def has_context(self) -> bool:
        return bool(self.primary_scope_id or self.fallback_scope_id)


# ============================================================================
# FILTERS
# ============================================================================

@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class In:
    column: str
    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class AnyILike:
    """Case-insensitive substring match of `term` against any of `columns`."""
    columns: Tuple[str, ...]
    term: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))


Clause = Union[Eq, In, AnyILike]


@dataclass(frozen=True)
class FilterSet:
    """Ordered conjunction (AND) of clauses. Compares by value."""
    clauses: Tuple[Clause, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "clauses", tuple(self.clauses))

    def and_(self, *clauses: Clause) -> "FilterSet":
        return FilterSet(self.clauses + tuple(clauses))

    def merge(self, other: "FilterSet") -> "FilterSet":
        return FilterSet(self.clauses + other.clauses)

    def __iter__(self):
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


# ============================================================================
# CANDIDATES
# ============================================================================

@dataclass(frozen=True)
class Candidate:
    """One normalized, selectable search result."""
    id: str
    display_name: str
    secondary_label: Optional[str] = None
    scope_label: Optional[str] = None
    auxiliary_badge: Optional[str] = None
    image_ref: Optional[str] = None
    detail: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def initials(self) -> str:
        name = (self.display_name or "").strip()
        return name[0].upper() if name else "?"


@dataclass(frozen=True)
class SelectorView:
    """Immutable snapshot of what a selector would render."""
    label: str
    placeholder: str
    input_disabled: bool
    term: str
    is_open: bool
    is_searching: bool
    state: SelectionState
    candidates: Tuple[Candidate, ...]
    message: Optional[str]
    error: Optional[str]
    helper_text: Optional[str]
    selected: Optional[Candidate]

