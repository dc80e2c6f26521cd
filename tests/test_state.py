import pytest

from search_select import InvalidTransitionError, SelectionEvent as Ev, SelectionState as St
from search_select import SelectionStateMachine


def _drive(machine, *events):
    for event in events:
        machine.fire(event)
    return machine.state


def test_search_round_trip():
    machine = SelectionStateMachine()
    assert _drive(machine, Ev.INPUT) == St.TYPING
    assert _drive(machine, Ev.DEBOUNCE_FIRED) == St.SEARCHING
    assert _drive(machine, Ev.QUERY_SUCCEEDED) == St.RESULTS_SHOWN
    assert _drive(machine, Ev.SELECT) == St.SELECTED
    assert _drive(machine, Ev.CLEAR) == St.IDLE


def test_short_term_returns_to_idle():
    machine = SelectionStateMachine()
    assert _drive(machine, Ev.INPUT, Ev.TERM_TOO_SHORT) == St.IDLE


def test_failure_then_retype_retries():
    machine = SelectionStateMachine()
    assert _drive(machine, Ev.INPUT, Ev.DEBOUNCE_FIRED, Ev.QUERY_FAILED) == St.ERROR
    assert _drive(machine, Ev.INPUT) == St.TYPING


@pytest.mark.parametrize("start", [St.TYPING, St.SEARCHING, St.RESULTS_SHOWN, St.ERROR])
def test_dismiss_goes_idle_from_open_states(start):
    machine = SelectionStateMachine(start)
    assert machine.fire(Ev.DISMISS) == St.IDLE


def test_focus_reopens_results():
    machine = SelectionStateMachine()
    assert machine.fire(Ev.FOCUS) == St.RESULTS_SHOWN


@pytest.mark.parametrize(
    "start, event",
    [
        (St.SELECTED, Ev.INPUT),
        (St.SELECTED, Ev.DISMISS),
        (St.IDLE, Ev.SELECT),
        (St.IDLE, Ev.CLEAR),
        (St.RESULTS_SHOWN, Ev.QUERY_SUCCEEDED),
        (St.TYPING, Ev.QUERY_FAILED),
    ],
)
def test_invalid_transitions_raise(start, event):
    machine = SelectionStateMachine(start)
    with pytest.raises(InvalidTransitionError):
        machine.fire(event)
    assert machine.state == start
    assert not machine.can(event)


def test_history_records_each_step():
    machine = SelectionStateMachine()
    _drive(machine, Ev.INPUT, Ev.TERM_TOO_SHORT)
    assert machine.history == [
        (St.IDLE, Ev.INPUT, St.TYPING),
        (St.TYPING, Ev.TERM_TOO_SHORT, St.IDLE),
    ]
