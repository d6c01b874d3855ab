"""
control/registry.py
===================
Owner of every stop-sign policy of one map, plus their persisted form.

:class:`StopSignRegistry` builds a :class:`ControlStopSign` for every
unsignalized intersection in id order, hands them out for queries and
edits, and saves / loads them.  A loaded policy is data: it is checked
against the map but never re-derived unless :meth:`StopSignRegistry.reset`
is called.

Persisted form (entries sorted by intersection id, then turn id)::

    {"stop_signs": [
        {"intersection": 1,
         "turns": [{"turn": {"parent": 1, "src": 100, "dst": 111},
                    "priority": "Priority"}, ...],
         "changed": false}, ...]}
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List

from pydantic import BaseModel, Field

from control.errors import PreconditionError, ValidationError
from control.priority import TurnPriority
from control.stop_signs import ControlStopSign
from mapmodel.io import TurnIDModel
from mapmodel.network import IntersectionID, MapView

log = logging.getLogger(__name__)


# ── Persisted schemas ─────────────────────────────────────────────────────────


class TurnPriorityEntry(BaseModel):
    turn: TurnIDModel
    priority: TurnPriority


class StopSignState(BaseModel):
    """One policy as written to disk."""
    intersection: int
    turns: List[TurnPriorityEntry] = Field(default_factory=list)
    changed: bool = False

    @classmethod
    def from_stop_sign(cls, ss: ControlStopSign) -> "StopSignState":
        return cls(
            intersection=ss.intersection,
            turns=[
                TurnPriorityEntry(turn=TurnIDModel.from_id(t), priority=ss.turns[t])
                for t in sorted(ss.turns)
            ],
            changed=ss.changed,
        )

    def to_stop_sign(self) -> ControlStopSign:
        return ControlStopSign(
            intersection=self.intersection,
            turns={e.turn.to_id(): e.priority for e in self.turns},
            changed=self.changed,
        )


class RegistryState(BaseModel):
    stop_signs: List[StopSignState] = Field(default_factory=list)


# ── Registry ──────────────────────────────────────────────────────────────────


class StopSignRegistry:
    """Every :class:`ControlStopSign` of a map, keyed by intersection id.

    Readers may query concurrently; edits need a single writer, which the
    caller has to guarantee.
    """

    def __init__(self, stop_signs: Dict[IntersectionID, ControlStopSign]) -> None:
        self._stop_signs = dict(stop_signs)

    @classmethod
    def build(cls, road_map: MapView) -> "StopSignRegistry":
        """Assign a policy to every unsignalized intersection."""
        stop_signs: Dict[IntersectionID, ControlStopSign] = {}
        for i in road_map.all_intersections():
            if i.has_traffic_signal:
                continue
            stop_signs[i.id] = ControlStopSign.new(road_map, i.id)
        log.info("Assigned %d stop signs", len(stop_signs))
        return cls(stop_signs)

    # ── access ────────────────────────────────────────────────────────────

    def get(self, intersection: IntersectionID) -> ControlStopSign:
        try:
            return self._stop_signs[intersection]
        except KeyError:
            raise PreconditionError(
                f"Intersection {intersection} has no stop sign"
            ) from None

    def __contains__(self, intersection: object) -> bool:
        return intersection in self._stop_signs

    def __iter__(self) -> Iterator[ControlStopSign]:
        for i in sorted(self._stop_signs):
            yield self._stop_signs[i]

    def __len__(self) -> int:
        return len(self._stop_signs)

    def ids(self) -> List[IntersectionID]:
        return sorted(self._stop_signs)

    def changed(self) -> List[IntersectionID]:
        """Ids of policies edited since they were assigned."""
        return [ss.intersection for ss in self if ss.is_changed()]

    def reset(self, intersection: IntersectionID, road_map: MapView) -> ControlStopSign:
        """Throw away edits and re-derive the policy from the map."""
        self.get(intersection)
        ss = ControlStopSign.new(road_map, intersection)
        self._stop_signs[intersection] = ss
        log.info("Reset stop sign %s", intersection)
        return ss

    def listing(self) -> List[str]:
        """Every policy's listing, ordered by intersection id."""
        lines: List[str] = []
        for ss in self:
            lines.extend(ss.listing())
        return lines

    # ── persistence ───────────────────────────────────────────────────────

    def to_state(self) -> RegistryState:
        return RegistryState(
            stop_signs=[StopSignState.from_stop_sign(ss) for ss in self]
        )

    @classmethod
    def from_state(cls, state: RegistryState, road_map: MapView) -> "StopSignRegistry":
        """Rebuild the registry from saved data without re-deriving it.

        Raises
        ------
        PreconditionError
            If a saved policy belongs to a signalized intersection.
        ValidationError
            If a saved policy names an unknown intersection, appears twice,
            does not match the map's turns or has conflicting priority
            turns, or if an unsignalized intersection has no saved policy.
        """
        stop_signs: Dict[IntersectionID, ControlStopSign] = {}
        for entry in state.stop_signs:
            ss = entry.to_stop_sign()
            if ss.intersection in stop_signs:
                raise ValidationError(f"Stop sign for {ss.intersection} is saved twice")
            try:
                i = road_map.get_i(ss.intersection)
            except KeyError:
                raise ValidationError(
                    f"Saved stop sign for unknown intersection {ss.intersection}"
                ) from None
            if i.has_traffic_signal:
                raise PreconditionError(
                    f"Saved stop sign for signalized intersection {ss.intersection}"
                )
            err = ss.validate(road_map)
            if err is not None:
                raise err
            stop_signs[ss.intersection] = ss

        missing = [
            i.id for i in road_map.all_intersections()
            if not i.has_traffic_signal and i.id not in stop_signs
        ]
        if missing:
            raise ValidationError(f"No saved stop sign for intersections {missing}")
        return cls(stop_signs)

    def dumps(self) -> str:
        return self.to_state().model_dump_json(indent=2)

    @classmethod
    def loads(cls, data: str, road_map: MapView) -> "StopSignRegistry":
        return cls.from_state(RegistryState.model_validate_json(data), road_map)

    def save(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.dumps())
            f.write("\n")
        log.info("Saved %d stop signs to %s", len(self), path)

    @classmethod
    def load(cls, path: str, road_map: MapView) -> "StopSignRegistry":
        with open(path, "r", encoding="utf-8") as f:
            registry = cls.loads(f.read(), road_map)
        log.info("Loaded %d stop signs from %s", len(registry), path)
        return registry
