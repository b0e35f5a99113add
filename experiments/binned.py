from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from capture import CaptureDisk, CaptureModel, generate_capture_disks
from experiments.base import Experiment
from spatial.grid import UniformGrid
from transmitters import Transmitter


def binned_pairs(transmitters: Sequence[Transmitter], cell_size: float) -> List[Tuple[int, int]]:
    """
    Ordered (i, j) position pairs of transmitters in the same or adjacent
    grid cells, sorted so disks come out in the exhaustive generation order.

    Every pair closer than ``cell_size`` is included; pairs further apart may
    be missed, which is why the cell size should not be below the range
    cutoff.
    """
    grid: UniformGrid[int] = UniformGrid(cell_size)
    for i, tx in enumerate(transmitters):
        grid.insert_point(i, tx.x, tx.y)

    pairs = [
        (i, j)
        for i, tx in enumerate(transmitters)
        for j in grid.neighbourhood(tx.x, tx.y)
    ]
    pairs.sort()
    return pairs


class BinnedExperiment(Experiment):
    """
    Transmitters are bucketed in a uniform grid and only pairs in the same or
    neighbouring cells are turned into disks. Intersections and coverage are
    still exhaustive.
    """

    name = "binned"

    def __init__(self, model: CaptureModel, cell_size: Optional[float] = None):
        super().__init__(model)
        self.cell_size = float(cell_size) if cell_size is not None else model.cutoff
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")

    @property
    def exact(self) -> bool:
        """False when the cell size can make adjacent-cell pairing miss disks."""
        return self.cell_size >= self.model.cutoff

    def generate_disks(self, transmitters: Sequence[Transmitter]) -> List[CaptureDisk]:
        pairs = binned_pairs(transmitters, self.cell_size)
        return generate_capture_disks(
            transmitters,
            self.model,
            ((transmitters[i], transmitters[j]) for i, j in pairs),
        )
