"""
Capture-disk model.

For an ordered transmitter pair (t1 captured, t2 interfering) and a capture
ratio beta in (0, 1), the capture disk is the Apollonius circle of points X
with |X - P1| / |X - P2| = beta. Inside it a receiver decodes t1 despite a
simultaneous transmission from t2.

Degenerate inputs (coincident transmitters, pairs beyond the range cutoff,
non-intersecting or concentric circles, NaN arithmetic) produce no result
rather than an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple
import math

from geometry import Circle, Point, in_rectangle
from transmitters import Transmitter


@dataclass(frozen=True)
class CaptureModel:
    """
    Physical and spatial constants of one run.

    Attributes:
        beta: capture ratio, strictly between 0 and 1.
        max_range_meters: transmit range; pairs further apart than twice this
            value produce no disk. This pruning is a heuristic, not physics.
        universe_width / universe_height: solution points must lie in
            [0, width] x [0, height].
    """

    beta: float
    max_range_meters: float
    universe_width: float
    universe_height: float

    def __post_init__(self) -> None:
        if not 0.0 < self.beta < 1.0:
            raise ValueError(f"beta must be in (0, 1), got {self.beta}")
        if self.max_range_meters <= 0:
            raise ValueError(f"max_range_meters must be positive, got {self.max_range_meters}")
        if self.universe_width <= 0 or self.universe_height <= 0:
            raise ValueError("universe dimensions must be positive")

    @property
    def cutoff(self) -> float:
        """Largest transmitter separation that still yields a capture disk."""
        return 2.0 * self.max_range_meters

    def in_universe(self, point: Point) -> bool:
        return in_rectangle(point, self.universe_width, self.universe_height)


@dataclass(frozen=True)
class CaptureDisk:
    """
    Capture disk of ``captured`` over ``interferer``.

    ``index`` is the disk's id within its trial. Two disks are equal when
    their transmitter pair matches, whatever their floating-point geometry.
    """

    index: int = field(compare=False)
    captured: Transmitter
    interferer: Transmitter
    circle: Circle = field(compare=False)

    @property
    def pair(self) -> Tuple[int, int]:
        return self.captured.id, self.interferer.id


def _same_transmitter(t1: Transmitter, t2: Transmitter) -> bool:
    return t1 is t2 or t1.id == t2.id or (t1.x == t2.x and t1.y == t2.y)


def generate_capture_disk(
    t1: Transmitter,
    t2: Transmitter,
    model: CaptureModel,
    index: int = 0,
) -> Optional[CaptureDisk]:
    """
    Compute the capture disk of ``t1`` against ``t2``.

    Returns ``None`` when the two are the same transmitter or are further
    apart than the range cutoff. On success the disk is also recorded on
    ``t1``.
    """
    if _same_transmitter(t1, t2):
        return None

    distance = math.hypot(t1.x - t2.x, t1.y - t2.y)
    if distance > model.cutoff:
        return None

    beta_sq = model.beta * model.beta
    denominator = 1.0 - beta_sq
    center = Point(
        (t1.x - beta_sq * t2.x) / denominator,
        (t1.y - beta_sq * t2.y) / denominator,
    )
    radius = model.beta * distance / denominator

    disk = CaptureDisk(index, t1, t2, Circle(center, radius))
    t1.add_disk(disk)
    return disk


def generate_capture_disks(
    transmitters: Sequence[Transmitter],
    model: CaptureModel,
    pairs: Optional[Iterable[Tuple[Transmitter, Transmitter]]] = None,
) -> List[CaptureDisk]:
    """
    Generate capture disks over ordered transmitter pairs.

    When ``pairs`` is None every ordered pair is tried. Disk indices are
    assigned contiguously in generation order.
    """
    if pairs is None:
        pairs = ((t1, t2) for t1 in transmitters for t2 in transmitters)

    disks: List[CaptureDisk] = []
    for t1, t2 in pairs:
        disk = generate_capture_disk(t1, t2, model, index=len(disks))
        if disk is not None:
            disks.append(disk)
    return disks


def intersect_disks(c1: CaptureDisk, c2: CaptureDisk, model: CaptureModel) -> List[Point]:
    """
    Boundary intersection points of two capture disks inside the universe.

    Returns an empty list for the same disk, for circles that are apart or
    externally tangent (d >= r1 + r2), and for circles that are nested,
    internally tangent or concentric (d <= |r1 - r2|). Points outside the
    universe rectangle are discarded, so 0, 1 or 2 points come back.
    """
    if c1 == c2:
        return []

    x1, y1, r1 = c1.circle.center.x, c1.circle.center.y, c1.circle.radius
    x2, y2, r2 = c2.circle.center.x, c2.circle.center.y, c2.circle.radius
    dx, dy = x2 - x1, y2 - y1
    d = math.hypot(dx, dy)

    if d >= r1 + r2 or d <= abs(r1 - r2):
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2 * d)
    h_sq = r1 * r1 - a * a
    if h_sq < 0:
        return []
    h = math.sqrt(h_sq)

    mx = x1 + a * dx / d
    my = y1 + a * dy / d
    candidates = (
        (mx + h * dy / d, my - h * dx / d),
        (mx - h * dy / d, my + h * dx / d),
    )

    points: List[Point] = []
    for x, y in candidates:
        if math.isnan(x) or math.isnan(y):
            continue
        point = Point(x, y)
        if model.in_universe(point) and point not in points:
            points.append(point)
    return points


def solution_points(
    disks: Sequence[CaptureDisk],
    model: CaptureModel,
    pairs: Optional[Iterable[Tuple[CaptureDisk, CaptureDisk]]] = None,
) -> List[Point]:
    """
    Candidate receiver locations: disk centers plus pairwise intersections.

    ``pairs`` restricts the intersection step to the given unordered disk
    pairs; by default every unordered pair is intersected. The result is
    deduplicated and sorted by (x, y).
    """
    points = {disk.circle.center for disk in disks if model.in_universe(disk.circle.center)}

    if pairs is None:
        pairs = (
            (disks[i], disks[j])
            for i in range(len(disks))
            for j in range(i + 1, len(disks))
        )
    for c1, c2 in pairs:
        points.update(intersect_disks(c1, c2, model))

    return sorted(points)
