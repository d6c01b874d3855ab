"""
mapmodel/network.py
===================
Road-network records for intersection control.

Defines the id types, :class:`Road`, :class:`Lane`, :class:`Turn`,
:class:`Intersection` and :class:`RoadMap` — an in-memory, read-only
view over already-imported map data.  Control code only ever talks to
the :class:`MapView` protocol, so any map implementation exposing the
same lookups and the conflict predicate can be passed in instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol, Set, Tuple

IntersectionID = int
RoadID = int
LaneID = int


# ── Enums ─────────────────────────────────────────────────────────────────────

class TurnType(Enum):
    """Shape of a movement through an intersection."""
    STRAIGHT = "Straight"
    RIGHT = "Right"
    LEFT = "Left"
    CROSSWALK = "Crosswalk"
    OTHER = "Other"


class LaneType(Enum):
    """What travels on a lane."""
    DRIVING = "Driving"
    SIDEWALK = "Sidewalk"


# ── Ids ───────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, order=True)
class TurnID:
    """A movement from lane ``src`` to lane ``dst`` through ``parent``.

    Field order defines the sort order used everywhere a stable turn
    ordering is needed.
    """

    parent: IntersectionID
    src: LaneID
    dst: LaneID

    def __str__(self) -> str:
        return f"TurnID({self.parent}, {self.src}, {self.dst})"


# ── Records ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Lane:
    """A single lane.

    Parameters
    ----------
    id : int
        Unique lane id.
    parent : int
        Id of the owning road (a lookup key, not an owning reference).
    lane_type : LaneType
        Driving lane or sidewalk.
    src_i, dst_i : int
        Intersections the lane leaves from and arrives at.
    """

    id: LaneID
    parent: RoadID
    lane_type: LaneType
    src_i: IntersectionID
    dst_i: IntersectionID


@dataclass(frozen=True)
class Road:
    """A road and the lanes it owns.

    ``highway`` is the functional classification tag (``"primary"``,
    ``"residential"`` ...); ``None`` when the source data has none.
    """

    id: RoadID
    highway: Optional[str] = None
    lanes: Tuple[LaneID, ...] = ()


@dataclass(frozen=True)
class Turn:
    """A permitted movement and its shape."""

    id: TurnID
    turn_type: TurnType

    @property
    def src(self) -> LaneID:
        return self.id.src

    @property
    def dst(self) -> LaneID:
        return self.id.dst


@dataclass(frozen=True)
class Intersection:
    """A node joining roads.

    ``turns`` is always kept sorted by :class:`TurnID`.
    """

    id: IntersectionID
    roads: FrozenSet[RoadID] = frozenset()
    incoming_lanes: Tuple[LaneID, ...] = ()
    outgoing_lanes: Tuple[LaneID, ...] = ()
    turns: Tuple[TurnID, ...] = ()
    has_traffic_signal: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "turns", tuple(sorted(self.turns)))


# ── Read-only collaborator interface ──────────────────────────────────────────

class MapView(Protocol):
    """Capabilities intersection control needs from a map."""

    def get_i(self, i: IntersectionID) -> Intersection: ...

    def get_t(self, t: TurnID) -> Turn: ...

    def get_l(self, l: LaneID) -> Lane: ...

    def get_r(self, r: RoadID) -> Road: ...

    def get_parent(self, l: LaneID) -> Road: ...

    def conflicts(self, t1: TurnID, t2: TurnID) -> bool: ...

    def all_intersections(self) -> List[Intersection]: ...


# ── Road map ──────────────────────────────────────────────────────────────────

class RoadMap:
    """In-memory map holding every record plus the turn conflict relation.

    The conflict relation is supplied by whoever built the geometry; it
    is stored symmetrically and a turn never conflicts with itself.
    Unknown ids raise :class:`KeyError`.
    """

    def __init__(
        self,
        roads: Iterable[Road],
        lanes: Iterable[Lane],
        intersections: Iterable[Intersection],
        turns: Iterable[Turn],
        conflicts: Iterable[Tuple[TurnID, TurnID]] = (),
        *,
        name: str = "map",
    ) -> None:
        self.name = name
        self.roads: Dict[RoadID, Road] = {r.id: r for r in roads}
        self.lanes: Dict[LaneID, Lane] = {l.id: l for l in lanes}
        self.intersections: Dict[IntersectionID, Intersection] = {
            i.id: i for i in intersections
        }
        self.turns: Dict[TurnID, Turn] = {t.id: t for t in turns}

        self._conflicts: Set[FrozenSet[TurnID]] = set()
        for t1, t2 in conflicts:
            if t1 != t2:
                self._conflicts.add(frozenset((t1, t2)))

        for i in self.intersections.values():
            for t in i.turns:
                if t not in self.turns:
                    raise KeyError(f"{i.id} lists unknown turn {t}")

    # ── lookups ───────────────────────────────────────────────────────────

    def get_i(self, i: IntersectionID) -> Intersection:
        return self.intersections[i]

    def get_t(self, t: TurnID) -> Turn:
        return self.turns[t]

    def get_l(self, l: LaneID) -> Lane:
        return self.lanes[l]

    def get_r(self, r: RoadID) -> Road:
        return self.roads[r]

    def get_parent(self, l: LaneID) -> Road:
        """Road owning lane *l*."""
        return self.roads[self.lanes[l].parent]

    def conflicts(self, t1: TurnID, t2: TurnID) -> bool:
        """True if executing *t1* and *t2* at the same time is unsafe."""
        if t1 == t2:
            return False
        return frozenset((t1, t2)) in self._conflicts

    def all_intersections(self) -> List[Intersection]:
        """Every intersection, sorted by id."""
        return [self.intersections[i] for i in sorted(self.intersections)]

    def all_turns(self) -> List[Turn]:
        """Every turn, sorted by id."""
        return [self.turns[t] for t in sorted(self.turns)]

    def conflict_pairs(self) -> List[Tuple[TurnID, TurnID]]:
        """The conflict relation as sorted ``(low, high)`` pairs."""
        return sorted(tuple(sorted(pair)) for pair in self._conflicts)

    def __repr__(self) -> str:
        return (
            f"RoadMap(name={self.name!r}, intersections={len(self.intersections)}, "
            f"turns={len(self.turns)})"
        )
