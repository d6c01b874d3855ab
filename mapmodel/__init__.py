"""
mapmodel — Road-network records consumed by intersection control
=================================================================

Modules
-------
network
    Ids, :class:`Road`, :class:`Lane`, :class:`Turn`,
    :class:`Intersection` and the read-only :class:`RoadMap` oracle.
builders
    :func:`build_crossing` synthesises simple 2–4 armed intersections.
io
    JSON map loading and deterministic turn listings.
"""

from .network import (
    Intersection,
    IntersectionID,
    Lane,
    LaneID,
    LaneType,
    MapView,
    Road,
    RoadID,
    RoadMap,
    Turn,
    TurnID,
    TurnType,
)
from .builders import build_crossing, merge_maps
from .io import load_map, map_from_dict, turn_listing

__all__ = [
    "Intersection",
    "IntersectionID",
    "Lane",
    "LaneID",
    "LaneType",
    "MapView",
    "Road",
    "RoadID",
    "RoadMap",
    "Turn",
    "TurnID",
    "TurnType",
    "build_crossing",
    "merge_maps",
    "load_map",
    "map_from_dict",
    "turn_listing",
]
