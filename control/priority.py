"""
control/priority.py
===================
The three-valued right-of-way level attached to every turn.

Ordering is defined by an explicit rank table, not by declaration order:
``STOP < YIELD < PRIORITY``.
"""

from __future__ import annotations

from enum import Enum
from functools import total_ordering


@total_ordering
class TurnPriority(Enum):
    """Right-of-way for a single turn.

    STOP
        Stop first; accepted with the lowest priority.
    YIELD
        Go immediately unless a conflicting turn was already accepted.
    PRIORITY
        Go without stopping.  Priority turns never conflict.
    """
    STOP = "Stop"
    YIELD = "Yield"
    PRIORITY = "Priority"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @classmethod
    def from_label(cls, label: str) -> "TurnPriority":
        """Parse a persisted label (``"Stop"``, ``"Yield"``, ``"Priority"``)."""
        try:
            return cls(label)
        except ValueError:
            raise ValueError(
                f"Unknown turn priority {label!r}; expected one of "
                f"{[p.value for p in cls]}"
            ) from None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TurnPriority):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self) -> str:
        return self.value


_RANK = {
    TurnPriority.STOP: 0,
    TurnPriority.YIELD: 1,
    TurnPriority.PRIORITY: 2,
}
