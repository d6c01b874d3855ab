#!/usr/bin/env python3
"""
Tests for the turn priority ordering and the road rank classifier.
"""

from __future__ import annotations

import unittest

from control.errors import ClassificationError
from control.priority import TurnPriority
from control.ranks import RANKS, road_rank


class TurnPriorityTests(unittest.TestCase):
    def test_total_order(self) -> None:
        self.assertLess(TurnPriority.STOP, TurnPriority.YIELD)
        self.assertLess(TurnPriority.YIELD, TurnPriority.PRIORITY)
        self.assertGreater(TurnPriority.PRIORITY, TurnPriority.STOP)
        self.assertLessEqual(TurnPriority.YIELD, TurnPriority.YIELD)
        self.assertEqual(
            sorted([TurnPriority.PRIORITY, TurnPriority.STOP, TurnPriority.YIELD]),
            [TurnPriority.STOP, TurnPriority.YIELD, TurnPriority.PRIORITY],
        )

    def test_labels(self) -> None:
        self.assertEqual(TurnPriority.from_label("Yield"), TurnPriority.YIELD)
        self.assertEqual(str(TurnPriority.PRIORITY), "Priority")
        with self.assertRaises(ValueError):
            TurnPriority.from_label("Go")

    def test_not_comparable_with_ints(self) -> None:
        with self.assertRaises(TypeError):
            TurnPriority.STOP < 1


class RoadRankTests(unittest.TestCase):
    def test_table(self) -> None:
        self.assertEqual(road_rank("motorway"), 20)
        self.assertEqual(road_rank("trunk_link"), 16)
        self.assertEqual(road_rank("primary"), 15)
        self.assertEqual(road_rank("tertiary_link"), 9)
        self.assertEqual(road_rank("residential"), 5)
        self.assertEqual(road_rank("footway"), 1)
        self.assertGreater(road_rank("secondary"), road_rank("tertiary"))

    def test_untagged_and_generic_roads_rank_zero(self) -> None:
        for tag in (None, "", "unclassified", "road"):
            self.assertEqual(road_rank(tag), 0, msg=repr(tag))

    def test_ranks_are_non_negative(self) -> None:
        self.assertTrue(all(rank >= 0 for rank in RANKS.values()))

    def test_unknown_tag_raises(self) -> None:
        with self.assertRaises(ClassificationError) as ctx:
            road_rank("cycleway")
        self.assertEqual(ctx.exception.highway, "cycleway")
        self.assertIsInstance(ctx.exception, ValueError)
        self.assertIn("cycleway", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
