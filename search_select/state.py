"""
Selection state machine.

States: IDLE, TYPING, SEARCHING, RESULTS_SHOWN, SELECTED, ERROR.
There is no terminal state; a selector is reused across many searches.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from search_select.errors import InvalidTransitionError
from search_select.models import SelectionEvent as Ev
from search_select.models import SelectionState as St

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """State transition rule."""

    from_states: FrozenSet[St]
    event: Ev
    to_state: St


_SEARCHABLE = frozenset({St.IDLE, St.TYPING, St.SEARCHING, St.RESULTS_SHOWN, St.ERROR})


class SelectionTransitionRules:
    """Selection transition rules definition."""

    TRANSITIONS = [
        # Typing (re-typing after results or an error retries)
        Transition(_SEARCHABLE, Ev.INPUT, St.TYPING),
        Transition(frozenset({St.TYPING}), Ev.TERM_TOO_SHORT, St.IDLE),
        # Search round-trip
        Transition(frozenset({St.TYPING}), Ev.DEBOUNCE_FIRED, St.SEARCHING),
        Transition(frozenset({St.SEARCHING}), Ev.QUERY_SUCCEEDED, St.RESULTS_SHOWN),
        Transition(frozenset({St.SEARCHING}), Ev.QUERY_FAILED, St.ERROR),
        # Picking and clearing
        Transition(frozenset({St.RESULTS_SHOWN, St.ERROR, St.TYPING}), Ev.SELECT, St.SELECTED),
        Transition(frozenset({St.SELECTED}), Ev.CLEAR, St.IDLE),
        # Outside click closes everything except a made selection
        Transition(_SEARCHABLE, Ev.DISMISS, St.IDLE),
        # Re-focusing the input re-opens results cached for the current term
        Transition(frozenset({St.IDLE}), Ev.FOCUS, St.RESULTS_SHOWN),
    ]

    _index: Dict[Tuple[St, Ev], St] = {}

    @classmethod
    def _build_index(cls) -> None:
        if cls._index:
            return
        index: Dict[Tuple[St, Ev], St] = {}
        for t in cls.TRANSITIONS:
            for state in t.from_states:
                index[(state, t.event)] = t.to_state
        cls._index = index

    @classmethod
    def target(cls, state: St, event: Ev) -> Optional[St]:
        cls._build_index()
        return cls._index.get((state, event))


class SelectionStateMachine:
    """Tracks the current state of one selector and its transition history."""

    def __init__(self, initial: St = St.IDLE):
        self.state = initial
        self.history: List[Tuple[St, Ev, St]] = []

    def can(self, event: Ev) -> bool:
        return SelectionTransitionRules.target(self.state, event) is not None

    def fire(self, event: Ev) -> St:
        target = SelectionTransitionRules.target(self.state, event)
        if target is None:
            raise InvalidTransitionError(f"{event.value} not allowed in state {self.state.value}")
        logger.debug("selection %s --%s--> %s", self.state.value, event.value, target.value)
        self.history.append((self.state, event, target))
        self.state = target
        return target
