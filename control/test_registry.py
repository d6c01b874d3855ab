#!/usr/bin/env python3
"""
Tests for the stop-sign registry and its persisted form.
"""

from __future__ import annotations

import json
import os
import tempfile
import unittest

from control.errors import PreconditionError, ValidationError
from control.priority import TurnPriority
from control.registry import StopSignRegistry
from mapmodel.builders import build_crossing, merge_maps
from mapmodel.network import RoadMap, TurnID


def _map() -> RoadMap:
    return merge_maps(
        build_crossing(1, {"N": "residential", "E": "primary", "S": "residential", "W": "primary"}),
        build_crossing(2, {"N": "residential", "E": "residential", "S": "residential"}),
        build_crossing(3, {"E": "tertiary", "W": "tertiary"}),
        build_crossing(4, {"N": "primary", "S": "primary"}, has_traffic_signal=True),
    )


class RegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.road_map = _map()
        self.registry = StopSignRegistry.build(self.road_map)

    def test_signalized_intersections_are_skipped(self) -> None:
        self.assertEqual(self.registry.ids(), [1, 2, 3])
        self.assertNotIn(4, self.registry)
        with self.assertRaises(PreconditionError):
            self.registry.get(4)

    def test_build_is_reproducible(self) -> None:
        again = StopSignRegistry.build(_map())
        self.assertEqual(self.registry.dumps(), again.dumps())
        self.assertEqual(self.registry.listing(), again.listing())

    def test_changed_and_reset(self) -> None:
        t = TurnID(2, 200, 211)
        self.registry.get(2).set_priority(t, TurnPriority.YIELD, self.road_map)
        self.assertEqual(self.registry.changed(), [2])

        ss = self.registry.reset(2, self.road_map)
        self.assertEqual(ss.get_priority(t), TurnPriority.STOP)
        self.assertFalse(ss.is_changed())
        self.assertEqual(self.registry.changed(), [])

    def test_persisted_form_is_sorted(self) -> None:
        data = json.loads(self.registry.dumps())
        ids = [entry["intersection"] for entry in data["stop_signs"]]
        self.assertEqual(ids, sorted(ids))
        for entry in data["stop_signs"]:
            keys = [(t["turn"]["parent"], t["turn"]["src"], t["turn"]["dst"]) for t in entry["turns"]]
            self.assertEqual(keys, sorted(keys))
            self.assertIn(entry["turns"][0]["priority"], ("Stop", "Yield", "Priority"))
            self.assertFalse(entry["changed"])

    def test_round_trip_keeps_edits(self) -> None:
        t = TurnID(1, 110, 131)
        self.registry.get(1).set_priority(t, TurnPriority.STOP, self.road_map)

        loaded = StopSignRegistry.loads(self.registry.dumps(), self.road_map)

        self.assertEqual(loaded.get(1).get_priority(t), TurnPriority.STOP)
        self.assertTrue(loaded.get(1).is_changed())
        self.assertEqual(loaded.get(1), self.registry.get(1))
        self.assertEqual(loaded.dumps(), self.registry.dumps())

    def test_save_and_load_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "stop_signs.json")
            self.registry.save(path)
            loaded = StopSignRegistry.load(path, self.road_map)
        self.assertEqual(loaded.ids(), self.registry.ids())
        for ss in loaded:
            self.assertEqual(ss, self.registry.get(ss.intersection))

    def test_load_rejects_missing_turn(self) -> None:
        data = json.loads(self.registry.dumps())
        data["stop_signs"][0]["turns"].pop()
        with self.assertRaises(ValidationError):
            StopSignRegistry.loads(json.dumps(data), self.road_map)

    def test_load_rejects_conflicting_priorities(self) -> None:
        data = json.loads(self.registry.dumps())
        for entry in data["stop_signs"][0]["turns"]:
            entry["priority"] = "Priority"
        with self.assertRaises(ValidationError):
            StopSignRegistry.loads(json.dumps(data), self.road_map)

    def test_load_rejects_signalized_intersection(self) -> None:
        data = json.loads(self.registry.dumps())
        data["stop_signs"].append({"intersection": 4, "turns": [], "changed": False})
        with self.assertRaises(PreconditionError):
            StopSignRegistry.loads(json.dumps(data), self.road_map)

    def test_load_rejects_missing_stop_sign(self) -> None:
        data = json.loads(self.registry.dumps())
        data["stop_signs"] = [e for e in data["stop_signs"] if e["intersection"] != 3]
        with self.assertRaises(ValidationError) as ctx:
            StopSignRegistry.loads(json.dumps(data), self.road_map)
        self.assertIn("[3]", str(ctx.exception))

    def test_load_rejects_duplicate_stop_sign(self) -> None:
        data = json.loads(self.registry.dumps())
        copy = json.loads(json.dumps(data["stop_signs"][0]))
        copy["changed"] = True
        data["stop_signs"].append(copy)
        with self.assertRaises(ValidationError):
            StopSignRegistry.loads(json.dumps(data), self.road_map)

    def test_load_rejects_unknown_intersection(self) -> None:
        data = json.loads(self.registry.dumps())
        data["stop_signs"].append({"intersection": 99, "turns": [], "changed": False})
        with self.assertRaises(ValidationError):
            StopSignRegistry.loads(json.dumps(data), self.road_map)


if __name__ == "__main__":
    unittest.main()
