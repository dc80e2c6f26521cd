# search_select/__init__.py
"""
Search & Select Module

Debounced, scope-aware entity selectors for coaching centers: student
search, class search and branch search share one controller.

Main components:
- models: Data models, filter clauses and enums
- debounce: Debouncer (settling timer)
- scope: ScopeResolver (branch / coaching center / class -> filters)
- executor: QueryExecutor (term + filters -> candidates)
- state: SelectionStateMachine
- dismiss: outside-click handling
- backend: QueryBackend protocol and SqlQueryBackend
- profiles: student / class / branch configurations
- selector: SearchSelect controller (main entry point)

Usage:
    from search_select import SearchSelect, SqlQueryBackend, CLASS_SEARCH

    async with SearchSelect(CLASS_SEARCH, SqlQueryBackend(engine), branch_id="B1") as picker:
        picker.type("math")
        await picker.wait_idle()
        picker.select(picker.candidates[0])
"""

from .backend import QueryBackend, SqlQueryBackend
from .debounce import Debouncer
from .dismiss import DismissHandler, PointerEvent, PointerEventBus, Region
from .errors import (
    ConfigError,
    InvalidTransitionError,
    NoContextError,
    QueryError,
    SearchSelectError,
)
from .executor import QueryExecutor
from .models import (
    AnyILike,
    Candidate,
    Eq,
    FilterSet,
    In,
    SearchScope,
    SelectionEvent,
    SelectionState,
    SelectorView,
)
from .profiles import (
    BRANCH_SEARCH,
    CLASS_SEARCH,
    PROFILES,
    STUDENT_SEARCH,
    SearchProfile,
    get_profile,
    student_profile,
)
from .scope import ScopeResolver
from .selector import SearchSelect
from .state import SelectionStateMachine
