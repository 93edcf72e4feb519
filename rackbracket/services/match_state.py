"""Explicit per-match state machine.

The stored ``status`` column only has four values; the engine works on the
richer state below and maps it back when writing.  Bye auto-advance is an
explicit ``auto_advance`` transition out of ``AWAITING_OPPONENT``.
"""
from enum import Enum

from rackbracket.errors import InvalidAdvance
from rackbracket.models import SLOTS


class MatchState(Enum):
    EMPTY = 'empty'
    AWAITING_OPPONENT = 'awaiting_opponent'
    READY = 'ready'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


FILL = 'fill'
CLEAR = 'clear'
START = 'start'
DECIDE = 'decide'
AUTO_ADVANCE = 'auto_advance'
REOPEN = 'reopen'
UNDO_BYE = 'undo_bye'

_TRANSITIONS = {
    (MatchState.EMPTY, FILL): MatchState.AWAITING_OPPONENT,
    (MatchState.AWAITING_OPPONENT, FILL): MatchState.READY,
    (MatchState.AWAITING_OPPONENT, CLEAR): MatchState.EMPTY,
    (MatchState.AWAITING_OPPONENT, AUTO_ADVANCE): MatchState.COMPLETED,
    (MatchState.READY, CLEAR): MatchState.AWAITING_OPPONENT,
    (MatchState.READY, START): MatchState.IN_PROGRESS,
    (MatchState.READY, DECIDE): MatchState.COMPLETED,
    (MatchState.IN_PROGRESS, START): MatchState.IN_PROGRESS,
    (MatchState.IN_PROGRESS, DECIDE): MatchState.COMPLETED,
    (MatchState.COMPLETED, REOPEN): MatchState.IN_PROGRESS,
    (MatchState.COMPLETED, UNDO_BYE): MatchState.AWAITING_OPPONENT,
}

_STATUS_BY_STATE = {
    MatchState.EMPTY: 'pending',
    MatchState.AWAITING_OPPONENT: 'pending',
    MatchState.READY: 'ready',
    MatchState.IN_PROGRESS: 'in_progress',
    MatchState.COMPLETED: 'completed',
}


def filled_slots(match):
    return sum(1 for slot in SLOTS if match.slot_player(slot) is not None)


def state_of(match):
    if match.status == 'completed':
        return MatchState.COMPLETED
    if match.status == 'in_progress':
        return MatchState.IN_PROGRESS
    filled = filled_slots(match)
    if filled == 2:
        return MatchState.READY
    if filled == 1:
        return MatchState.AWAITING_OPPONENT
    return MatchState.EMPTY


def transition(state, event):
    """Pure transition function; unknown moves raise InvalidAdvance."""
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidAdvance(
            f'Cannot {event.replace("_", " ")} a match that is {state.value.replace("_", " ")}',
            state=state.value,
        ) from None


def status_for(state):
    return _STATUS_BY_STATE[state]


def apply_event(match, event):
    """Move ``match`` through ``event`` and write the resulting status."""
    new_state = transition(state_of(match), event)
    match.status = status_for(new_state)
    return new_state


def awaiting_bye(match):
    return bool(match.is_bye) and state_of(match) is MatchState.AWAITING_OPPONENT
