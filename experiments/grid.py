from __future__ import annotations

from typing import List, Optional, Sequence, Set, Tuple

from capture import CaptureDisk, CaptureModel, solution_points
from coverage_index import CoverageIndex, build_coverage_index_from_candidates
from experiments.binned import BinnedExperiment
from geometry import CONTAINMENT_TOLERANCE, Point
from spatial.grid import Box, UniformGrid


def clipped_disk_box(disk: CaptureDisk, model: CaptureModel) -> Optional[Box]:
    """
    Bounding box of a disk, padded by the containment slack and clipped to
    the universe. None when the disk lies entirely outside the universe,
    in which case it can neither cover nor intersect at a solution point.
    """
    pad = 2 * CONTAINMENT_TOLERANCE * max(1.0, disk.circle.radius)
    min_x, min_y, max_x, max_y = disk.circle.bounding_box()
    min_x = max(min_x - pad, 0.0)
    min_y = max(min_y - pad, 0.0)
    max_x = min(max_x + pad, model.universe_width)
    max_y = min(max_y + pad, model.universe_height)
    if min_x > max_x or min_y > max_y:
        return None
    return min_x, min_y, max_x, max_y


def pairs_sharing_buckets(buckets) -> List[Tuple[int, int]]:
    """Unordered (i, j), i < j, disk position pairs that share at least one bucket."""
    pairs: Set[Tuple[int, int]] = set()
    for members in buckets:
        for a in range(len(members)):
            for b in range(a + 1, len(members)):
                i, j = members[a], members[b]
                pairs.add((i, j) if i < j else (j, i))
    return sorted(pairs)


class GridExperiment(BinnedExperiment):
    """
    Binned pairing plus a uniform grid over the universe holding every disk
    in each cell its bounding box touches. Only disks sharing a cell are
    intersected, and a point is only tested against the disks of its cell.
    """

    name = "grid"

    def _disk_grid(self, disks: Sequence[CaptureDisk]) -> UniformGrid[int]:
        grid: UniformGrid[int] = UniformGrid(self.cell_size)
        for pos, disk in enumerate(disks):
            box = clipped_disk_box(disk, self.model)
            if box is not None:
                grid.insert_box(pos, box)
        return grid

    def solution_points(self, disks: Sequence[CaptureDisk]) -> List[Point]:
        grid = self._disk_grid(disks)
        pairs = pairs_sharing_buckets(members for _, members in grid.cells())
        return solution_points(disks, self.model, ((disks[i], disks[j]) for i, j in pairs))

    def coverage_index(self, points: Sequence[Point], disks: Sequence[CaptureDisk]) -> CoverageIndex:
        grid = self._disk_grid(disks)
        return build_coverage_index_from_candidates(
            points, disks, lambda p: grid.items_at(p.x, p.y)
        )
