"""
Tests for the point -> covering disks index.
"""

import math

from capture import CaptureDisk
from coverage_index import build_coverage_index, build_coverage_index_from_candidates
from geometry import Circle, Point
from transmitters import Transmitter


def _disk(index: int, cx: float, cy: float, r: float) -> CaptureDisk:
    return CaptureDisk(index, Transmitter(2 * index, 0.0, 0.0), Transmitter(2 * index + 1, 1.0, 1.0), Circle(Point(cx, cy), r))


DISKS = [_disk(0, 50.0, 50.0, 10.0), _disk(1, 60.0, 50.0, 10.0)]
POINTS = [
    Point(50.0, 50.0),                      # center of 0, on the boundary of 1
    Point(55.0, 50.0 + math.sqrt(75)),      # boundary intersection
    Point(45.0, 50.0),
    Point(90.0, 90.0),
]


def test_exhaustive_index_is_boundary_inclusive():
    index = build_coverage_index(POINTS, DISKS)

    assert index[Point(50.0, 50.0)] == frozenset({0, 1})
    assert index[Point(55.0, 50.0 + math.sqrt(75))] == frozenset({0, 1})
    assert index[Point(45.0, 50.0)] == frozenset({0})
    assert index[Point(90.0, 90.0)] == frozenset()
    assert len(index) == 4


def test_candidate_index_matches_exhaustive_with_all_candidates():
    exhaustive = build_coverage_index(POINTS, DISKS)
    restricted = build_coverage_index_from_candidates(POINTS, DISKS, lambda p: range(len(DISKS)))

    assert dict(restricted) == dict(exhaustive)


def test_candidate_index_only_tests_given_disks():
    restricted = build_coverage_index_from_candidates(POINTS, DISKS, lambda p: [1])

    assert restricted[Point(50.0, 50.0)] == frozenset({1})
    assert restricted[Point(45.0, 50.0)] == frozenset()


def test_empty_inputs():
    assert len(build_coverage_index([], DISKS)) == 0
    index = build_coverage_index(POINTS, [])
    assert all(ids == frozenset() for ids in index.values())
