"""
control/stop_signs.py
=====================
Stop-sign style control for unsignalized intersections.

A :class:`ControlStopSign` partitions an intersection's turns into three
groups:

1. **Priority** — must be mutually non-conflicting; cars do not have to
   stop before doing the turn.
2. **Yield** — go immediately if no previously accepted conflicting turn
   is in progress.
3. **Stop** — stop first, then get accepted with the lowest priority.

:meth:`ControlStopSign.new` derives the partition from road topology and
classification, validates it, and only then hands it out.  Afterwards
the mapping changes only through :meth:`ControlStopSign.set_priority`.

Every operation takes the map as an explicit read-only
:class:`~mapmodel.network.MapView` argument.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from control.errors import PreconditionError, ValidationError
from control.priority import TurnPriority
from control.ranks import road_rank
from mapmodel.network import IntersectionID, LaneID, MapView, TurnID, TurnType

log = logging.getLogger(__name__)


@dataclass
class ControlStopSign:
    """Turn → priority mapping for one intersection.

    Attributes
    ----------
    intersection : int
        The controlled intersection.
    turns : dict
        :class:`TurnID` → :class:`TurnPriority`.  Always covers exactly
        the intersection's turns.
    changed : bool
        Set permanently by the first accepted manual edit.
    """

    intersection: IntersectionID
    turns: Dict[TurnID, TurnPriority] = field(default_factory=dict)
    changed: bool = False

    # ── construction ──────────────────────────────────────────────────────

    @classmethod
    def new(cls, road_map: MapView, intersection: IntersectionID) -> "ControlStopSign":
        """Assign and validate the policy for *intersection*.

        Raises
        ------
        PreconditionError
            If the intersection has a traffic signal.
        ClassificationError
            If a connected road has an unknown classification tag.
        ValidationError
            If the ranked or uniform assignment is invalid.  These are
            safe by construction, so this is an internal logic error.
        """
        if road_map.get_i(intersection).has_traffic_signal:
            raise PreconditionError(
                f"Intersection {intersection} has a traffic signal"
            )
        ss = cls.assign(road_map, intersection)
        err = ss.validate(road_map)
        if err is not None:
            raise err
        return ss

    @classmethod
    def assign(cls, road_map: MapView, intersection: IntersectionID) -> "ControlStopSign":
        """Pick a strategy from the intersection's shape and road ranks."""
        i = road_map.get_i(intersection)
        if len(i.roads) <= 2:
            log.debug("%s: degenerate or dead-end (%d roads)", intersection, len(i.roads))
            return cls.for_degenerate_and_deadend(road_map, intersection)

        # Outgoing lanes are ranked too, since sidewalks don't have a clean
        # single direction.
        rank_per_lane: Dict[LaneID, int] = {}
        for l in list(i.incoming_lanes) + list(i.outgoing_lanes):
            rank_per_lane[l] = road_rank(road_map.get_parent(l).highway)
        ranks = set(rank_per_lane.values())
        if len(ranks) <= 1:
            log.debug("%s: all roads share rank %s, all-way stop", intersection, ranks)
            return cls.all_way_stop(road_map, intersection)

        highest_rank = max(ranks)
        log.debug("%s: ranked assignment, highest rank %d", intersection, highest_rank)
        ss = cls(intersection)
        for t in sorted(i.turns):
            if rank_per_lane[t.src] == highest_rank:
                # Straight and right turns off the highest rank road get
                # priority when possible; everything else yields.
                turn_type = road_map.get_t(t).turn_type
                if (
                    turn_type in (TurnType.STRAIGHT, TurnType.RIGHT)
                    and ss._could_be_priority(t, road_map)
                ):
                    ss.turns[t] = TurnPriority.PRIORITY
                else:
                    ss.turns[t] = TurnPriority.YIELD
            else:
                ss.turns[t] = TurnPriority.STOP
        return ss

    @classmethod
    def all_way_stop(cls, road_map: MapView, intersection: IntersectionID) -> "ControlStopSign":
        i = road_map.get_i(intersection)
        return cls(intersection, {t: TurnPriority.STOP for t in sorted(i.turns)})

    @classmethod
    def for_degenerate_and_deadend(
        cls, road_map: MapView, intersection: IntersectionID,
    ) -> "ControlStopSign":
        """Everything gets priority except crosswalks.

        Multi-lane roads and bad intersection geometry sometimes make more
        turns conflict than really should; when that happens the candidate
        is discarded for an all-way stop.
        """
        i = road_map.get_i(intersection)
        ss = cls(intersection)
        for t in sorted(i.turns):
            if road_map.get_t(t).turn_type == TurnType.CROSSWALK:
                ss.turns[t] = TurnPriority.STOP
            else:
                ss.turns[t] = TurnPriority.PRIORITY

        err = ss.validate(road_map)
        if err is not None:
            log.warning("Giving up on for_degenerate_and_deadend(%s): %s", intersection, err)
            return cls.all_way_stop(road_map, intersection)
        return ss

    # ── queries ───────────────────────────────────────────────────────────

    def get_priority(self, turn: TurnID) -> TurnPriority:
        try:
            return self.turns[turn]
        except KeyError:
            raise PreconditionError(
                f"{turn} is not a turn of intersection {self.intersection}"
            ) from None

    def could_be_priority_turn(self, turn: TurnID, road_map: MapView) -> bool:
        """True if no current Priority turn conflicts with *turn*."""
        self._require_turn(turn)
        return self._could_be_priority(turn, road_map)

    def is_priority_lane(self, lane: LaneID) -> bool:
        """True if some turn from *lane* does better than Stop."""
        return any(
            t.src == lane and pri > TurnPriority.STOP
            for t, pri in self.turns.items()
        )

    def is_changed(self) -> bool:
        # Edits that restore the original assignment still count as changes
        return self.changed

    def priority_turns(self) -> List[TurnID]:
        return sorted(t for t, pri in self.turns.items() if pri == TurnPriority.PRIORITY)

    def listing(self) -> List[str]:
        """``"<turn> is <priority>"`` lines sorted by turn id."""
        return [f"{t} is {self.turns[t]}" for t in sorted(self.turns)]

    # ── mutation ──────────────────────────────────────────────────────────

    def set_priority(self, turn: TurnID, priority: TurnPriority, road_map: MapView) -> None:
        """Overwrite one turn's priority and mark the policy as changed.

        Raises
        ------
        PreconditionError
            If *turn* is unknown, *priority* is not a :class:`TurnPriority`,
            or *priority* is Priority and the turn conflicts with an
            existing Priority turn.  The mapping is left untouched.
        """
        self._require_turn(turn)
        if not isinstance(priority, TurnPriority):
            raise PreconditionError(f"{priority!r} is not a TurnPriority")
        if priority == TurnPriority.PRIORITY and not self._could_be_priority(turn, road_map):
            raise PreconditionError(
                f"{turn} conflicts with a priority turn of intersection {self.intersection}"
            )
        log.info(
            "Stop sign %s: %s %s -> %s",
            self.intersection, turn, self.turns[turn], priority,
        )
        self.turns[turn] = priority
        self.changed = True

    # ── validation ────────────────────────────────────────────────────────

    def validate(self, road_map: MapView) -> Optional[ValidationError]:
        """Check coverage and Priority/Priority conflicts.

        Returns ``None`` when the mapping is valid, otherwise the first
        problem found.  Never mutates the policy.
        """
        # Does the assignment cover the correct set of turns?
        all_turns = road_map.get_i(self.intersection).turns
        if len(self.turns) != len(all_turns):
            return ValidationError(
                f"Stop sign for {self.intersection} covers {len(self.turns)} turns, "
                f"intersection has {len(all_turns)}"
            )
        for t in all_turns:
            if t not in self.turns:
                return ValidationError(f"Stop sign for {self.intersection} is missing {t}")

        # Do any of the priority turns conflict?
        priority_turns = self.priority_turns()
        for idx, t1 in enumerate(priority_turns):
            for t2 in priority_turns[idx + 1:]:
                if road_map.conflicts(t1, t2):
                    return ValidationError(
                        f"Stop sign has conflicting priority turns {t1} and {t2}"
                    )
        return None

    # ── helpers ───────────────────────────────────────────────────────────

    def _require_turn(self, turn: TurnID) -> None:
        if turn not in self.turns:
            raise PreconditionError(
                f"{turn} is not a turn of intersection {self.intersection}"
            )

    def _could_be_priority(self, turn: TurnID, road_map: MapView) -> bool:
        for t, pri in self.turns.items():
            if pri == TurnPriority.PRIORITY and road_map.conflicts(turn, t):
                return False
        return True
