from __future__ import annotations

from typing import List, Sequence, Tuple

from capture import CaptureDisk, CaptureModel, generate_capture_disks, solution_points
from coverage_index import CoverageIndex, build_coverage_index_from_candidates
from experiments.base import Experiment
from experiments.grid import clipped_disk_box
from geometry import Point
from spatial.quadtree import QuadTree
from transmitters import Transmitter


# Widens the kd-tree radius so float rounding never drops a pair at the cutoff;
# generate_capture_disk applies the exact test.
_CUTOFF_SLACK = 1e-9


class RecursiveGridExperiment(Experiment):
    """
    Adaptively partitioned trial.

    Transmitters are paired through a kd-tree, which splits space where
    transmitters are dense. Disk intersections and coverage use a quadtree
    over the universe whose cells subdivide while they hold more than
    ``cell_capacity`` disks. No setting trades accuracy.
    """

    name = "recursive"

    def __init__(self, model: CaptureModel, cell_capacity: int = 16, max_depth: int = 10):
        super().__init__(model)
        self.cell_capacity = cell_capacity
        self.max_depth = max_depth

    def _pairs_in_range(self, transmitters: Sequence[Transmitter]) -> List[Tuple[int, int]]:
        from scipy.spatial import cKDTree

        tree = cKDTree([(tx.x, tx.y) for tx in transmitters])
        reach = self.model.cutoff * (1.0 + _CUTOFF_SLACK) + _CUTOFF_SLACK
        pairs = []
        for i, j in tree.query_pairs(reach):
            pairs.append((i, j))
            pairs.append((j, i))
        pairs.sort()
        return pairs

    def generate_disks(self, transmitters: Sequence[Transmitter]) -> List[CaptureDisk]:
        if not transmitters:
            return []
        pairs = self._pairs_in_range(transmitters)
        return generate_capture_disks(
            transmitters,
            self.model,
            ((transmitters[i], transmitters[j]) for i, j in pairs),
        )

    def _disk_tree(self, disks: Sequence[CaptureDisk]) -> QuadTree[int]:
        tree: QuadTree[int] = QuadTree(
            (0.0, 0.0, self.model.universe_width, self.model.universe_height),
            self.cell_capacity,
            self.max_depth,
        )
        for pos, disk in enumerate(disks):
            box = clipped_disk_box(disk, self.model)
            if box is not None:
                tree.insert(pos, box)
        return tree

    def solution_points(self, disks: Sequence[CaptureDisk]) -> List[Point]:
        tree = self._disk_tree(disks)
        pairs = sorted((i, j) if i < j else (j, i) for i, j in tree.overlapping_pairs())
        return solution_points(disks, self.model, ((disks[i], disks[j]) for i, j in pairs))

    def coverage_index(self, points: Sequence[Point], disks: Sequence[CaptureDisk]) -> CoverageIndex:
        tree = self._disk_tree(disks)
        return build_coverage_index_from_candidates(points, disks, lambda p: tree.items_at(p.x, p.y))
