"""
mapmodel/builders.py
====================
Synthesises small, regular intersections for tests, demos and the JSON
``crossings`` shorthand.

:func:`build_crossing` lays out 2–4 arms (``"N"``, ``"E"``, ``"S"``,
``"W"``) around one intersection.  Each arm is its own road with one
inbound and one outbound driving lane plus an inbound and an outbound
sidewalk.  Vehicles drive on the right.

Conflicts are derived from where lanes meet the intersection boundary.
Walking clockwise from the north-west corner the boundary points are::

    N_in, N_out, E_in, E_out, S_in, S_out, W_in, W_out

A movement is the chord between its entry and exit point.  Two
movements conflict when they share a destination lane or when their
chords cross; movements from the same source lane queue behind each
other and never conflict.  A crosswalk conflicts with every vehicle
movement entering or leaving its arm.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .network import (
    Intersection,
    IntersectionID,
    Lane,
    LaneType,
    Road,
    RoadMap,
    Turn,
    TurnID,
    TurnType,
)

ARMS: Tuple[str, ...] = ("N", "E", "S", "W")

# Clockwise arm offset → movement shape
_SHAPE_BY_OFFSET: Dict[int, TurnType] = {
    1: TurnType.LEFT,
    2: TurnType.STRAIGHT,
    3: TurnType.RIGHT,
}

# Lane slot within an arm
_DRIVING_IN = 0
_DRIVING_OUT = 1
_SIDEWALK_IN = 2
_SIDEWALK_OUT = 3


def _road_id(i: IntersectionID, arm_idx: int) -> int:
    return i * 10 + arm_idx


def _lane_id(i: IntersectionID, arm_idx: int, slot: int) -> int:
    return i * 100 + arm_idx * 10 + slot


def _chords_cross(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    lo, hi = min(a), max(a)
    inside = [lo < p < hi for p in b]
    return inside[0] != inside[1]


def build_crossing(
    intersection_id: IntersectionID,
    arms: Mapping[str, Optional[str]],
    *,
    has_traffic_signal: bool = False,
    crosswalks: bool = True,
    name: str = "",
) -> RoadMap:
    """Build a single intersection with the given arms.

    Parameters
    ----------
    intersection_id : int
        Id of the intersection.  Road and lane ids are derived from it
        so several crossings can be merged with :func:`merge_maps`.
    arms : mapping
        Arm name (``"N"``, ``"E"``, ``"S"``, ``"W"``) → ``highway`` tag of
        the road on that arm (``None`` for an untagged road).
    has_traffic_signal : bool
        Mark the intersection as signal-controlled.
    crosswalks : bool
        Generate one crosswalk per arm.
    """
    unknown = set(arms) - set(ARMS)
    if unknown:
        raise ValueError(f"Unknown arms {sorted(unknown)}; expected {ARMS}")
    if not arms:
        raise ValueError("A crossing needs at least one arm")

    i = intersection_id
    present = [(idx, arm) for idx, arm in enumerate(ARMS) if arm in arms]

    roads: List[Road] = []
    lanes: List[Lane] = []
    incoming: List[int] = []
    outgoing: List[int] = []
    for idx, arm in present:
        rid = _road_id(i, idx)
        # Far end of every arm is a border node with a negative id
        border = -rid - 1
        lane_ids = tuple(_lane_id(i, idx, slot) for slot in range(4))
        roads.append(Road(id=rid, highway=arms[arm], lanes=lane_ids))
        lanes.extend([
            Lane(lane_ids[_DRIVING_IN], rid, LaneType.DRIVING, border, i),
            Lane(lane_ids[_DRIVING_OUT], rid, LaneType.DRIVING, i, border),
            Lane(lane_ids[_SIDEWALK_IN], rid, LaneType.SIDEWALK, border, i),
            Lane(lane_ids[_SIDEWALK_OUT], rid, LaneType.SIDEWALK, i, border),
        ])
        incoming.extend([lane_ids[_DRIVING_IN], lane_ids[_SIDEWALK_IN]])
        outgoing.extend([lane_ids[_DRIVING_OUT], lane_ids[_SIDEWALK_OUT]])

    # (turn, entry arm idx, exit arm idx)
    movements: List[Tuple[Turn, int, int]] = []
    for a_idx, _ in present:
        for b_idx, _ in present:
            if a_idx == b_idx:
                continue
            tid = TurnID(i, _lane_id(i, a_idx, _DRIVING_IN), _lane_id(i, b_idx, _DRIVING_OUT))
            shape = _SHAPE_BY_OFFSET[(b_idx - a_idx) % 4]
            movements.append((Turn(tid, shape), a_idx, b_idx))

    crossings: List[Tuple[Turn, int]] = []
    if crosswalks:
        for idx, _ in present:
            tid = TurnID(i, _lane_id(i, idx, _SIDEWALK_IN), _lane_id(i, idx, _SIDEWALK_OUT))
            crossings.append((Turn(tid, TurnType.CROSSWALK), idx))

    conflicts: List[Tuple[TurnID, TurnID]] = []
    for n, (t1, a1, b1) in enumerate(movements):
        for t2, a2, b2 in movements[n + 1:]:
            if t1.src == t2.src:
                continue
            if t1.dst == t2.dst or _chords_cross((2 * a1, 2 * b1 + 1), (2 * a2, 2 * b2 + 1)):
                conflicts.append((t1.id, t2.id))
    for walk, arm_idx in crossings:
        for t, a, b in movements:
            if arm_idx in (a, b):
                conflicts.append((walk.id, t.id))

    turns = [t for t, _, _ in movements] + [t for t, _ in crossings]
    intersection = Intersection(
        id=i,
        roads=frozenset(r.id for r in roads),
        incoming_lanes=tuple(incoming),
        outgoing_lanes=tuple(outgoing),
        turns=tuple(t.id for t in turns),
        has_traffic_signal=has_traffic_signal,
    )
    return RoadMap(
        roads, lanes, [intersection], turns, conflicts,
        name=name or f"crossing_{i}",
    )


def merge_maps(
    *maps: RoadMap,
    extra_conflicts: Iterable[Tuple[TurnID, TurnID]] = (),
    name: str = "map",
) -> RoadMap:
    """Combine several maps into one, optionally adding conflicts.

    ``extra_conflicts`` lets callers model irregular geometry where more
    turns conflict than the regular layout suggests.
    """
    roads: List[Road] = []
    lanes: List[Lane] = []
    intersections: List[Intersection] = []
    turns: List[Turn] = []
    conflicts: List[Tuple[TurnID, TurnID]] = []
    for m in maps:
        roads.extend(m.roads.values())
        lanes.extend(m.lanes.values())
        intersections.extend(m.intersections.values())
        turns.extend(m.turns.values())
        conflicts.extend(m.conflict_pairs())
    conflicts.extend(extra_conflicts)
    return RoadMap(roads, lanes, intersections, turns, conflicts, name=name)
