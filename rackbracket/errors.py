"""Exceptions raised by the bracket engine.

Every error knows the HTTP status the routes answer with and how to render
itself as a JSON error payload.
"""


class BracketError(Exception):
    """Base class for all bracket engine errors."""
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        data = {'error': self.message}
        data.update(self.details)
        return data


class InvalidInput(BracketError):
    """Malformed tournament or seeding input, rejected before any mutation."""


class InvalidAdvance(BracketError):
    """A result that cannot be applied to the match in its current state."""
    status_code = 409


class IrreversibleAdvance(BracketError):
    """Undo refused because something downstream already progressed."""
    status_code = 409

    NEXT_MATCH_STARTED = 'next_match_started'
    LOSERS_MATCH_STARTED = 'losers_match_started'
    NO_RESULT = 'no_result'

    _MESSAGES = {
        NEXT_MATCH_STARTED: 'Cannot undo - the next match has already started.',
        LOSERS_MATCH_STARTED: 'Cannot undo - a match in the losers bracket has already started.',
        NO_RESULT: 'No winner to undo.',
    }

    def __init__(self, reason, match_id=None):
        super().__init__(self._MESSAGES[reason], reason=reason, match_id=match_id)
        self.reason = reason
        self.match_id = match_id


class NotFound(BracketError):
    status_code = 404
