"""
control/errors.py
=================
Exception types raised by intersection control.

* :class:`ClassificationError` — a road carries a classification tag
  with no known rank.  Malformed map data; map construction must abort.
* :class:`ValidationError` — a candidate assignment is incomplete or
  grants Priority to two conflicting turns.
* :class:`PreconditionError` — a caller broke an API contract (signal
  controlled intersection, unknown turn, conflicting Priority edit).
"""


class StopSignError(Exception):
    """Base class for every intersection-control failure."""


class ClassificationError(StopSignError, ValueError):
    """Unrecognised road classification tag."""

    def __init__(self, highway: str) -> None:
        super().__init__(f"Unknown OSM highway {highway}")
        self.highway = highway


class ValidationError(StopSignError):
    """A turn → priority mapping breaks a policy invariant."""


class PreconditionError(StopSignError):
    """An operation was called with arguments it does not accept."""
