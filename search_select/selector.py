# search_select/selector.py
"""
SearchSelect: one generic debounced, scope-aware selector.

The student, class and branch selectors differ only in their SearchProfile.
The controller owns term, results, visibility and selection; the backend
is injected and shared.

Every query carries a sequence number. Responses that are not from the
latest query, or that arrive after the selector left SEARCHING, are
dropped. A new keystroke, a dismissal, a pick or unmount also cancel the
in-flight query task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Tuple

from search_select.backend import QueryBackend
from search_select.debounce import Debouncer
from search_select.dismiss import DismissHandler, PointerEventBus, Region
from search_select.errors import NoContextError, QueryError
from search_select.executor import QueryExecutor
from search_select.models import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MIN_QUERY_LENGTH,
    DEFAULT_RESULT_LIMIT,
    Candidate,
    SearchScope,
    SelectionEvent as Ev,
    SelectionState as St,
    SelectorView,
)
from search_select.profiles import SearchProfile
from search_select.scope import ScopeResolver
from search_select.state import SelectionStateMachine

logger = logging.getLogger(__name__)


class SearchSelect:
    def __init__(
        self,
        profile: SearchProfile,
        backend: QueryBackend,
        *,
        branch_id: Optional[str] = None,
        coaching_center_id: Optional[str] = None,
        class_id: Optional[str] = None,
        selected: Optional[Candidate] = None,
        on_select: Optional[Callable[[Candidate], None]] = None,
        on_clear: Optional[Callable[[], None]] = None,
        label: Optional[str] = None,
        placeholder: Optional[str] = None,
        required: bool = False,
        disabled: bool = False,
        error: Optional[str] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        min_query_length: int = DEFAULT_MIN_QUERY_LENGTH,
        result_limit: int = DEFAULT_RESULT_LIMIT,
        event_bus: Optional[PointerEventBus] = None,
        region: Optional[Region] = None,
    ):
        self.profile = profile
        self.scope: SearchScope = profile.scope_for(branch_id, coaching_center_id, class_id)
        self.on_select = on_select
        self.on_clear = on_clear
        self.label = label if label is not None else profile.label
        self.placeholder = placeholder
        self.required = required
        self.disabled = disabled
        self.error = error
        self.min_query_length = min_query_length
        self.result_limit = result_limit

        self._resolver = ScopeResolver(backend, profile)
        self._executor = QueryExecutor(backend, profile)
        self._debouncer = Debouncer(debounce_ms)
        self._machine = SelectionStateMachine(St.SELECTED if selected else St.IDLE)

        self._term = ""
        self._candidates: Tuple[Candidate, ...] = ()
        self._results_term: Optional[str] = None
        self._query_error: Optional[str] = None
        self._is_open = False
        self._selected = selected
        self._seq = 0
        self._inflight: Optional[asyncio.Task] = None

        self.region = region or Region(0, 0, 0, 0)
        self._dismiss = (
            DismissHandler(event_bus, lambda: self.region, self.dismiss)
            if event_bus is not None else None
        )

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> None:
        if self._dismiss:
            self._dismiss.mount()

    def unmount(self) -> None:
        self._debouncer.cancel()
        self._cancel_inflight()
        if self._dismiss:
            self._dismiss.unmount()

    async def __aenter__(self) -> "SearchSelect":
        self.mount()
        return self

    async def __aexit__(self, *exc) -> None:
        self.unmount()

    # ------------------------------------------------------------------
    # read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> St:
        return self._machine.state

    @property
    def term(self) -> str:
        return self._term

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return self._candidates

    @property
    def selected(self) -> Optional[Candidate]:
        return self._selected

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def has_context(self) -> bool:
        return self._resolver.has_context(self.scope)

    @property
    def input_disabled(self) -> bool:
        return self.disabled or not self.has_context

    @property
    def history(self):
        return list(self._machine.history)

    # ------------------------------------------------------------------
    # user actions
    # ------------------------------------------------------------------

    def type(self, text: str) -> None:
        """Input change. Must be called from a running event loop."""
        if self.input_disabled or self.state is St.SELECTED:
            logger.debug("Ignoring input %r: input disabled or selection shown", text)
            return

        self._term = text
        self._cancel_inflight()
        self._machine.fire(Ev.INPUT)

        query = text.strip()
        if len(query) < self.min_query_length:
            self._debouncer.cancel()
            self._candidates = ()
            self._results_term = None
            self._query_error = None
            self._is_open = False
            self._machine.fire(Ev.TERM_TOO_SHORT)
            return

        self._debouncer.schedule(query, self._on_debounce)

    def focus(self) -> None:
        """Re-open results cached for the current term after a dismissal."""
        if self.input_disabled or self.state is not St.IDLE:
            return
        query = self._term.strip()
        if len(query) < self.min_query_length:
            return
        if self._results_term == query:
            self._machine.fire(Ev.FOCUS)
            self._is_open = True
        else:
            self.type(self._term)

    def select(self, candidate: Candidate) -> None:
        """User pick. Fires on_select exactly once."""
        self._machine.fire(Ev.SELECT)
        self._debouncer.cancel()
        self._cancel_inflight()
        self._selected = candidate
        self._reset_search()
        if self.on_select:
            self.on_select(candidate)

    def clear(self) -> None:
        """Explicit deselect. Fires on_clear exactly once."""
        self._machine.fire(Ev.CLEAR)
        self._selected = None
        self._reset_search()
        if self.on_clear:
            self.on_clear()

    def dismiss(self) -> None:
        """Outside click: close the dropdown, keep the typed text. No-op once selected."""
        if self.state is St.SELECTED:
            return
        self._debouncer.cancel()
        self._cancel_inflight()
        self._is_open = False
        self._machine.fire(Ev.DISMISS)

    def set_scope(
        self,
        branch_id: Optional[str] = None,
        coaching_center_id: Optional[str] = None,
        class_id: Optional[str] = None,
    ) -> None:
        """Parent context changed: drop pending work and results made for the old scope."""
        self.scope = self.profile.scope_for(branch_id, coaching_center_id, class_id)
        if self.state is St.SELECTED:
            return
        self._debouncer.cancel()
        self._cancel_inflight()
        self._reset_search()
        self._machine.fire(Ev.DISMISS)

    async def wait_idle(self) -> None:
        """Wait for the pending debounce timer and any in-flight query to settle."""
        while True:
            await self._debouncer.wait()
            task = self._inflight
            if task is None or task.done():
                if not self._debouncer.pending:
                    return
                continue
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # view
    # ------------------------------------------------------------------

    def view(self) -> SelectorView:
        texts = self.profile.texts
        state = self.state

        if not self.has_context:
            placeholder = texts.no_context_placeholder
        else:
            placeholder = self.placeholder or texts.placeholder

        message = None
        if self._is_open:
            if state is St.SEARCHING:
                message = f"Searching {texts.noun}..."
            elif state is St.ERROR:
                message = self._query_error
            elif state is St.RESULTS_SHOWN and not self._candidates:
                message = texts.no_matches(self._term.strip())

        helper = None
        if self._selected is None and not self.error:
            helper = texts.helper(self.min_query_length) if self.has_context else texts.no_context_helper

        return SelectorView(
            label=f"{self.label} *" if self.required else self.label,
            placeholder=placeholder,
            input_disabled=self.input_disabled,
            term=self._term,
            is_open=self._is_open,
            is_searching=state is St.SEARCHING,
            state=state,
            candidates=self._candidates if self._is_open and state is not St.SEARCHING else (),
            message=message,
            error=self.error,
            helper_text=helper,
            selected=self._selected,
        )

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _reset_search(self) -> None:
        self._term = ""
        self._candidates = ()
        self._results_term = None
        self._query_error = None
        self._is_open = False

    def _cancel_inflight(self) -> None:
        # bumping the sequence also invalidates a response already on its way back
        self._seq += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _on_debounce(self, query: str) -> None:
        if self.state is not St.TYPING:
            return
        self._machine.fire(Ev.DEBOUNCE_FIRED)
        # results for the previous term are not selectable while searching
        self._candidates = ()
        self._results_term = None
        self._query_error = None
        self._is_open = True
        self._seq += 1
        seq = self._seq
        self._inflight = asyncio.get_running_loop().create_task(self._run_query(seq, query))

    def _is_current(self, seq: int) -> bool:
        return seq == self._seq and self.state is St.SEARCHING

    async def _run_query(self, seq: int, query: str) -> None:
        try:
            filters = await self._resolver.resolve(self.scope)
            if filters is None:
                candidates = []
            else:
                candidates = await self._executor.execute(query, filters, self.result_limit)
        except (QueryError, NoContextError) as e:
            if not self._is_current(seq):
                logger.debug("Dropping stale failure for %r", query)
                return
            message = e.user_message if isinstance(e, QueryError) else str(e)
            self._candidates = ()
            self._results_term = None
            self._query_error = message
            self._machine.fire(Ev.QUERY_FAILED)
            return

        if not self._is_current(seq):
            logger.debug("Dropping stale results for %r", query)
            return
        self._candidates = tuple(candidates)
        self._results_term = query
        self._machine.fire(Ev.QUERY_SUCCEEDED)
