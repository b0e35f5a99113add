"""
Greedy receiver placement.

Weighted maximum coverage: every solution point is a candidate set whose
weight is the number of not-yet-claimed capture disks it lies in. Receivers
are picked one at a time, each taking the heaviest remaining point and
permanently claiming its disks, so no disk is ever assigned twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Set, Tuple

from capture import CaptureDisk
from coverage_index import CoverageIndex
from geometry import Point


@dataclass(frozen=True)
class Receiver:
    """A placed receiver and the capture disks it was assigned."""

    position: Point
    disks: Tuple[CaptureDisk, ...]

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def score(self) -> int:
        return len(self.disks)

    @property
    def contention(self) -> int:
        """Distinct captured transmitters among the assigned disks."""
        return len({disk.captured.id for disk in self.disks})

    def capture_rates(self) -> Dict[int, float]:
        """
        Per captured transmitter id: share of that transmitter's disks this
        receiver was assigned.
        """
        counts: Dict[int, int] = {}
        owned: Dict[int, int] = {}
        for disk in self.disks:
            tx = disk.captured
            counts[tx.id] = counts.get(tx.id, 0) + 1
            owned[tx.id] = len(tx.disks)
        return {tx_id: counts[tx_id] / owned[tx_id] for tx_id in counts if owned[tx_id]}


def _selection_key(point: Point, weight: int) -> Tuple[int, float, float]:
    # Heaviest first, then smallest x, then smallest y.
    return -weight, point.x, point.y


def place_receivers(
    points: Sequence[Point],
    disks: Sequence[CaptureDisk],
    budget: int,
    index: CoverageIndex,
) -> List[Receiver]:
    """
    Select up to ``budget`` receivers greedily.

    Each iteration works on the coverage of the remaining points restricted
    to the remaining disks; the index is trimmed in place of a full rebuild,
    which gives the same coverage sets because containment never changes.

    Stops when the budget is spent, when no points or disks remain, or when
    the best remaining point covers nothing.
    """
    if budget <= 0:
        return []

    by_index = {disk.index: disk for disk in disks}
    remaining_disks: Set[int] = set(by_index)
    remaining: Dict[Point, Set[int]] = {
        point: set(index.get(point, ())) & remaining_disks for point in points
    }

    receivers: List[Receiver] = []
    while len(receivers) < budget and remaining and remaining_disks:
        best = min(remaining, key=lambda p: _selection_key(p, len(remaining[p])))
        claimed = remaining.pop(best)
        if not claimed:
            break

        receivers.append(
            Receiver(best, tuple(by_index[i] for i in sorted(claimed)))
        )
        remaining_disks -= claimed
        for covered in remaining.values():
            covered -= claimed

    return receivers
