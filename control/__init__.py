"""
control — Right-of-way policy for unsignalized intersections
============================================================

Modules
-------
priority
    :class:`TurnPriority` ordered ``STOP < YIELD < PRIORITY``.
ranks
    :func:`road_rank` classifier and :data:`RANKS` table.
stop_signs
    :class:`ControlStopSign` assignment, validation and edits.
registry
    :class:`StopSignRegistry` owning a map's policies and their
    persisted form.
errors
    :class:`ClassificationError`, :class:`ValidationError`,
    :class:`PreconditionError`.
"""

from .errors import (
    ClassificationError,
    PreconditionError,
    StopSignError,
    ValidationError,
)
from .priority import TurnPriority
from .ranks import RANKS, road_rank
from .stop_signs import ControlStopSign
from .registry import RegistryState, StopSignRegistry, StopSignState

__all__ = [
    "ClassificationError",
    "PreconditionError",
    "StopSignError",
    "ValidationError",
    "TurnPriority",
    "RANKS",
    "road_rank",
    "ControlStopSign",
    "RegistryState",
    "StopSignRegistry",
    "StopSignState",
]
