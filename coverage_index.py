"""
Coverage index: which capture disks contain each candidate receiver point.

The index is the bipartite point/disk structure the greedy placement engine
consumes. Disks are referred to by their per-trial ``index``.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Sequence

import numpy as np

from capture import CaptureDisk
from geometry import CONTAINMENT_TOLERANCE, Point


class CoverageIndex(Mapping[Point, FrozenSet[int]]):
    """Read-only mapping from solution point to the ids of disks containing it."""

    def __init__(self, covering: Dict[Point, FrozenSet[int]]):
        self._covering = covering

    def __getitem__(self, point: Point) -> FrozenSet[int]:
        return self._covering[point]

    def __iter__(self) -> Iterator[Point]:
        return iter(self._covering)

    def __len__(self) -> int:
        return len(self._covering)


def build_coverage_index(points: Sequence[Point], disks: Sequence[CaptureDisk]) -> CoverageIndex:
    """
    Exhaustive construction: every disk is tested against every point.

    The point set is tested against one disk at a time with numpy, which
    keeps memory linear in the number of points.
    """
    covering: Dict[Point, set] = {p: set() for p in points}
    if points and disks:
        _fill_exhaustive(covering, points, disks)
    return CoverageIndex({p: frozenset(ids) for p, ids in covering.items()})


def _fill_exhaustive(covering: Dict[Point, set], points: Sequence[Point], disks: Sequence[CaptureDisk]) -> None:
    xs = np.fromiter((p.x for p in points), dtype=float, count=len(points))
    ys = np.fromiter((p.y for p in points), dtype=float, count=len(points))
    for disk in disks:
        circle = disk.circle
        # Same arithmetic as Circle.contains so both builders agree on boundaries.
        slack = CONTAINMENT_TOLERANCE * max(1.0, circle.radius)
        dx = xs - circle.center.x
        dy = ys - circle.center.y
        inside = np.flatnonzero(dx * dx + dy * dy <= (circle.radius + slack) ** 2)
        for i in inside:
            covering[points[i]].add(disk.index)


def build_coverage_index_from_candidates(
    points: Sequence[Point],
    disks: Sequence[CaptureDisk],
    candidates_for: Callable[[Point], Iterable[int]],
) -> CoverageIndex:
    """
    Spatially restricted construction.

    ``candidates_for(point)`` yields positions into ``disks`` that may
    contain the point; only those are tested. The result equals the
    exhaustive index as long as no containing disk is left out of the
    candidates.
    """
    covering: Dict[Point, FrozenSet[int]] = {}
    for point in points:
        ids = set()
        for pos in candidates_for(point):
            disk = disks[pos]
            if disk.circle.contains(point):
                ids.add(disk.index)
        covering[point] = frozenset(ids)
    return CoverageIndex(covering)
