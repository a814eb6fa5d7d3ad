"""Exceptions for the marble race engine.

Illegal moves are not exceptions: the movement resolver answers them with an
unchanged position. These exceptions signal broken invariants, which only a
programming error can cause.
"""


class InvariantViolation(RuntimeError):
    """Raised when a state change would break a board invariant."""


class ExhaustedSupplyError(InvariantViolation):
    """Raised when a card is drawn while both deck and discard pile are empty."""
