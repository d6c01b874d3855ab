"""
mapmodel/io.py
==============
JSON map descriptions and deterministic listings.

A map file either spells out every record (``roads``, ``lanes``,
``intersections``, ``turns``, ``conflicts``) or uses the ``crossings``
shorthand expanded by :func:`~mapmodel.builders.build_crossing`.  Both
forms may be mixed in one file.  Validation is done with pydantic.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, Field, model_validator

from .builders import build_crossing, merge_maps
from .network import (
    Intersection,
    Lane,
    LaneType,
    Road,
    RoadMap,
    Turn,
    TurnID,
    TurnType,
)

log = logging.getLogger(__name__)


# ── Pydantic schemas ──────────────────────────────────────────────────────────


class TurnIDModel(BaseModel):
    """Serialized :class:`TurnID`."""
    parent: int
    src: int
    dst: int

    def to_id(self) -> TurnID:
        return TurnID(self.parent, self.src, self.dst)

    @classmethod
    def from_id(cls, t: TurnID) -> "TurnIDModel":
        return cls(parent=t.parent, src=t.src, dst=t.dst)


class RoadModel(BaseModel):
    id: int
    highway: Optional[str] = None
    lanes: List[int] = Field(default_factory=list)


class LaneModel(BaseModel):
    id: int
    parent: int
    lane_type: LaneType = LaneType.DRIVING
    src_i: int
    dst_i: int


class TurnModel(TurnIDModel):
    turn_type: TurnType


class IntersectionModel(BaseModel):
    id: int
    roads: List[int] = Field(default_factory=list)
    incoming_lanes: List[int] = Field(default_factory=list)
    outgoing_lanes: List[int] = Field(default_factory=list)
    has_traffic_signal: bool = False


class CrossingModel(BaseModel):
    """Shorthand for :func:`build_crossing`."""
    id: int
    arms: Dict[Literal["N", "E", "S", "W"], Optional[str]] = Field(min_length=1)
    has_traffic_signal: bool = False
    crosswalks: bool = True


class MapFile(BaseModel):
    """Top-level map description."""
    name: str = "map"
    crossings: List[CrossingModel] = Field(default_factory=list)
    roads: List[RoadModel] = Field(default_factory=list)
    lanes: List[LaneModel] = Field(default_factory=list)
    intersections: List[IntersectionModel] = Field(default_factory=list)
    turns: List[TurnModel] = Field(default_factory=list)
    conflicts: List[Tuple[TurnIDModel, TurnIDModel]] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_references(self) -> "MapFile":
        """Explicit records must only point at records defined beside them."""
        roads = {r.id for r in self.roads}
        lanes = {l.id for l in self.lanes}
        for l in self.lanes:
            if l.parent not in roads:
                raise ValueError(f"lane {l.id} belongs to unknown road {l.parent}")

        lanes_of: Dict[int, Set[int]] = {}
        for i in self.intersections:
            for l in i.incoming_lanes + i.outgoing_lanes:
                if l not in lanes:
                    raise ValueError(f"intersection {i.id} lists unknown lane {l}")
            lanes_of[i.id] = set(i.incoming_lanes) | set(i.outgoing_lanes)

        for t in self.turns:
            if t.parent not in lanes_of:
                raise ValueError(f"{t.to_id()} belongs to unknown intersection {t.parent}")
            for l in (t.src, t.dst):
                if l not in lanes_of[t.parent]:
                    raise ValueError(
                        f"{t.to_id()} uses lane {l}, which does not enter or "
                        f"leave intersection {t.parent}"
                    )
        return self


# ── Loading ───────────────────────────────────────────────────────────────────


def _explicit_map(desc: MapFile) -> RoadMap:
    turns = [Turn(t.to_id(), t.turn_type) for t in desc.turns]
    turns_by_parent: Dict[int, List[TurnID]] = {}
    for t in turns:
        turns_by_parent.setdefault(t.id.parent, []).append(t.id)

    intersections = [
        Intersection(
            id=i.id,
            roads=frozenset(i.roads),
            incoming_lanes=tuple(i.incoming_lanes),
            outgoing_lanes=tuple(i.outgoing_lanes),
            turns=tuple(turns_by_parent.get(i.id, ())),
            has_traffic_signal=i.has_traffic_signal,
        )
        for i in desc.intersections
    ]
    return RoadMap(
        roads=[Road(r.id, r.highway, tuple(r.lanes)) for r in desc.roads],
        lanes=[Lane(l.id, l.parent, l.lane_type, l.src_i, l.dst_i) for l in desc.lanes],
        intersections=intersections,
        turns=turns,
        conflicts=[(a.to_id(), b.to_id()) for a, b in desc.conflicts],
        name=desc.name,
    )


def map_from_dict(data: Mapping[str, Any]) -> RoadMap:
    """Build a :class:`RoadMap` from a parsed map description.

    Raises
    ------
    pydantic.ValidationError
        If the description does not match the schema, a crossing has no
        arms, or an explicit record refers to a road, lane or
        intersection the description does not define.
    """
    desc = MapFile.model_validate(data)
    parts = [
        build_crossing(
            c.id,
            c.arms,
            has_traffic_signal=c.has_traffic_signal,
            crosswalks=c.crosswalks,
        )
        for c in desc.crossings
    ]
    if desc.intersections or desc.turns:
        parts.append(_explicit_map(desc))
    road_map = merge_maps(*parts, name=desc.name)
    log.info(
        "Loaded map %s: %d intersections, %d turns",
        road_map.name, len(road_map.intersections), len(road_map.turns),
    )
    return road_map


def load_map(path: str) -> RoadMap:
    """Read a JSON map description from *path*."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return map_from_dict(data)


# ── Listings ──────────────────────────────────────────────────────────────────


def turn_listing(road_map: RoadMap) -> List[str]:
    """One ``"<turn> is a <TurnType>"`` line per turn, sorted by turn id.

    Kept under version control as a golden file to notice when turn
    generation changes.
    """
    return [f"{t.id} is a {t.turn_type.value}" for t in road_map.all_turns()]
