"""
editor/api.py
=============
FastAPI editing surface over a map's stop-sign policies.

Start the server through :mod:`main`::

    python main.py serve maps/example.json     # → http://localhost:8000/stop_signs

Endpoints
---------
* ``GET  /stop_signs``                      ids and changed flags
* ``GET  /stop_signs/{i}``                  full policy
* ``GET  /stop_signs/{i}/candidates``       turns that could become Priority
* ``PUT  /stop_signs/{i}/turns``            set one turn's priority
* ``POST /stop_signs/{i}/reset``            re-derive from the map

Editors should only offer Priority for turns listed by ``candidates``;
anything else is rejected with 409 and the policy is left unchanged.
"""

import logging
import threading
from typing import List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from control.errors import PreconditionError
from control.priority import TurnPriority
from control.registry import StopSignRegistry, StopSignState
from control.stop_signs import ControlStopSign
from mapmodel.io import TurnIDModel
from mapmodel.network import RoadMap

log = logging.getLogger("editor")


# ── Pydantic request / response schemas ──────────────────────────────────────


class StopSignSummary(BaseModel):
    """One row of ``GET /stop_signs``."""
    intersection: int
    changed: bool


class SetPriorityRequest(BaseModel):
    """Body of ``PUT /stop_signs/{i}/turns``."""
    turn: TurnIDModel
    priority: TurnPriority


# ── FastAPI application ──────────────────────────────────────────────────────


def create_app(road_map: RoadMap, registry: StopSignRegistry) -> FastAPI:
    """Build the editing API for *registry*, whose policies belong to *road_map*.

    Handlers run in a thread pool, so edits go through one lock to keep
    a single writer.
    """
    app = FastAPI(
        title="Stop Sign Editor API",
        description="Inspect and edit right-of-way at unsignalized intersections.",
        version="1.0",
    )
    write_lock = threading.Lock()

    def _stop_sign(i: int) -> ControlStopSign:
        try:
            return registry.get(i)
        except PreconditionError as exc:
            raise HTTPException(status_code=404, detail=str(exc))

    @app.get("/stop_signs", response_model=List[StopSignSummary])
    def list_stop_signs():
        return [
            StopSignSummary(intersection=ss.intersection, changed=ss.is_changed())
            for ss in registry
        ]

    @app.get("/stop_signs/{i}", response_model=StopSignState)
    def get_stop_sign(i: int):
        return StopSignState.from_stop_sign(_stop_sign(i))

    @app.get("/stop_signs/{i}/candidates", response_model=List[TurnIDModel])
    def priority_candidates(i: int):
        ss = _stop_sign(i)
        return [
            TurnIDModel.from_id(t)
            for t in sorted(ss.turns)
            if ss.could_be_priority_turn(t, road_map)
        ]

    @app.put("/stop_signs/{i}/turns", response_model=StopSignState)
    def set_turn_priority(i: int, req: SetPriorityRequest):
        turn = req.turn.to_id()
        # Look the policy up under the lock; a reset replaces it.
        with write_lock:
            ss = _stop_sign(i)
            if turn not in ss.turns:
                raise HTTPException(
                    status_code=404,
                    detail=f"{turn} is not a turn of intersection {i}",
                )
            try:
                ss.set_priority(turn, req.priority, road_map)
            except PreconditionError as exc:
                log.warning("Rejected edit of %s: %s", i, exc)
                raise HTTPException(status_code=409, detail=str(exc))
            return StopSignState.from_stop_sign(ss)

    @app.post("/stop_signs/{i}/reset", response_model=StopSignState)
    def reset_stop_sign(i: int):
        with write_lock:
            _stop_sign(i)
            return StopSignState.from_stop_sign(registry.reset(i, road_map))

    return app
