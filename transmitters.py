"""
Transmitter placement utilities.

Transmitters are sampled inside a placement square centred in the simulation
universe. Five spatial distributions are supported and are selected with a
free-form string such as ``"clustered 0.5 0.1"``: the first token names the
distribution, the remaining tokens are its optional numeric parameters.
Coordinate files use one ``x y`` pair per line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence
import math
import random

from geometry import Point


@dataclass(frozen=True)
class Transmitter:
    """
    A transmitter at a fixed position within one trial.

    ``disks`` collects the capture disks in which this transmitter is the
    captured party; it is filled during disk generation and excluded from
    equality and hashing.
    """

    id: int
    x: float
    y: float
    disks: List = field(default_factory=list, compare=False, repr=False)

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def add_disk(self, disk) -> None:
        self.disks.append(disk)


@dataclass(frozen=True)
class PlacementRegion:
    """Universe bounds plus the centred placement square transmitters use."""

    universe_width: float
    universe_height: float
    square_width: float
    square_height: float

    @property
    def x_offset(self) -> float:
        return (self.universe_width - self.square_width) * 0.5

    @property
    def y_offset(self) -> float:
        return (self.universe_height - self.square_height) * 0.5

    def uniform_point(self, rng: random.Random) -> tuple[float, float]:
        x = self.x_offset + rng.random() * self.square_width
        y = self.y_offset + rng.random() * self.square_height
        return x, y

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        """Clamp a position into the placement square."""
        x = min(max(x, self.x_offset), self.x_offset + self.square_width)
        y = min(max(y, self.y_offset), self.y_offset + self.square_height)
        return x, y


def parse_distribution(spec: str) -> tuple[str, List[float]]:
    """
    Split a distribution string into its lower-cased name and numeric params.

    Raises:
        ValueError: if the name is unknown or a parameter is not numeric.
    """
    parts = spec.split()
    if not parts:
        return "uniform", []
    name = parts[0].lower()
    if name not in DISTRIBUTIONS:
        raise ValueError(
            f"Unknown transmitter distribution '{parts[0]}'; expected one of {sorted(DISTRIBUTIONS)}"
        )
    try:
        params = [float(p) for p in parts[1:]]
    except ValueError as exc:
        raise ValueError(f"Invalid parameters in distribution '{spec}': {exc}") from None
    return name, params


def generate_uniform(count: int, region: PlacementRegion, rng: random.Random) -> List[Transmitter]:
    """Uniformly random positions inside the placement square."""
    transmitters: List[Transmitter] = []
    for idx in range(count):
        x, y = region.uniform_point(rng)
        transmitters.append(Transmitter(idx, x, y))
    return transmitters


def generate_clustered(
    count: int,
    region: PlacementRegion,
    rng: random.Random,
    cluster_prob: float = 0.5,
    radius_pct: float = 0.1,
) -> List[Transmitter]:
    """
    Positions clustered around previously placed transmitters.

    With probability ``cluster_prob`` a transmitter is placed within
    ``radius_pct`` of the mean square dimension of a randomly chosen existing
    transmitter; otherwise it is placed uniformly. The first transmitter is
    always uniform.
    """
    cluster_prob = min(max(cluster_prob, 0.0), 1.0)
    if radius_pct < 0:
        radius_pct = 0.1
    elif radius_pct > 1:
        radius_pct = 1.0

    max_radius = (region.square_width + region.square_height) / 2 * radius_pct
    transmitters: List[Transmitter] = []
    for idx in range(count):
        if not transmitters or rng.random() > cluster_prob:
            x, y = region.uniform_point(rng)
        else:
            anchor = transmitters[rng.randrange(len(transmitters))]
            radius = rng.random() * max_radius
            theta = rng.random() * math.tau
            x, y = region.clamp(
                anchor.x + math.cos(theta) * radius,
                anchor.y + math.sin(theta) * radius,
            )
        transmitters.append(Transmitter(idx, x, y))
    return transmitters


def _band_width(region: PlacementRegion, width: float | None) -> float:
    if width is None:
        width = min(region.square_width, region.square_height) * 0.1
    if width <= 0:
        width = 1.0
    return min(width, region.square_width / 2, region.square_height / 2)


def generate_rectangled(
    count: int,
    region: PlacementRegion,
    rng: random.Random,
    width: float | None = None,
) -> List[Transmitter]:
    """Uniform positions in a band of ``width`` along the square's edges."""
    width = _band_width(region, width)
    x0, y0 = region.x_offset, region.y_offset
    inner_min_x, inner_max_x = x0 + width, x0 + region.square_width - width
    inner_min_y, inner_max_y = y0 + width, y0 + region.square_height - width

    transmitters: List[Transmitter] = []
    while len(transmitters) < count:
        x, y = region.uniform_point(rng)
        if inner_min_x < x < inner_max_x and inner_min_y < y < inner_max_y:
            continue
        transmitters.append(Transmitter(len(transmitters), x, y))
    return transmitters


def _inside_ellipse(x: float, y: float, cx: float, cy: float, rx: float, ry: float) -> bool:
    if rx <= 0 or ry <= 0:
        return False
    nx = (x - cx) / rx
    ny = (y - cy) / ry
    return nx * nx + ny * ny < 1.0


def generate_circled(
    count: int,
    region: PlacementRegion,
    rng: random.Random,
    width: float | None = None,
) -> List[Transmitter]:
    """Uniform positions in an elliptical ring of ``width`` inscribed in the square."""
    width = _band_width(region, width)
    cx = region.x_offset + region.square_width / 2
    cy = region.y_offset + region.square_height / 2
    outer_rx, outer_ry = region.square_width / 2, region.square_height / 2
    inner_rx, inner_ry = outer_rx - width, outer_ry - width

    transmitters: List[Transmitter] = []
    while len(transmitters) < count:
        x, y = region.uniform_point(rng)
        if not _inside_ellipse(x, y, cx, cy, outer_rx, outer_ry):
            continue
        if _inside_ellipse(x, y, cx, cy, inner_rx, inner_ry):
            continue
        transmitters.append(Transmitter(len(transmitters), x, y))
    return transmitters


def generate_sine(
    count: int,
    region: PlacementRegion,
    rng: random.Random,
    radius: float | None = None,
) -> List[Transmitter]:
    """
    Positions scattered along two half-circle arcs forming one sine period.

    The right arc bulges upwards around the centre of the right half of the
    square, the left arc downwards around the centre of the left half.
    Positions are jittered by up to 5% of ``radius`` in each direction.
    """
    limit = min(region.square_width / 4, region.square_height / 4)
    if radius is None:
        radius = min(region.square_width, region.square_height) * 0.2
    if radius < 0 or radius > limit:
        radius = limit

    wiggle = radius * 0.1
    mid_y = region.y_offset + region.square_height / 2
    left_x = region.x_offset + region.square_width / 4
    right_x = region.x_offset + 3 * region.square_width / 4

    transmitters: List[Transmitter] = []
    for idx in range(count):
        if rng.random() < 0.5:
            theta = rng.random() * math.pi
            cx = right_x
        else:
            theta = -rng.random() * math.pi
            cx = left_x
        x = cx + math.cos(theta) * radius - wiggle / 2 + rng.random() * wiggle
        y = mid_y + math.sin(theta) * radius - wiggle / 2 + rng.random() * wiggle
        x, y = region.clamp(x, y)
        transmitters.append(Transmitter(idx, x, y))
    return transmitters


DISTRIBUTIONS: Dict[str, Callable[..., List[Transmitter]]] = {
    "uniform": generate_uniform,
    "clustered": generate_clustered,
    "rectangled": generate_rectangled,
    "circled": generate_circled,
    "sine": generate_sine,
}


def generate_transmitters(
    count: int,
    distribution: str,
    region: PlacementRegion,
    rng: random.Random,
) -> List[Transmitter]:
    """
    Generate ``count`` transmitters using the named distribution string.

    Extra parameters beyond those a distribution accepts are ignored.
    """
    name, params = parse_distribution(distribution)
    generator = DISTRIBUTIONS[name]
    max_params = {"uniform": 0, "clustered": 2}.get(name, 1)
    return generator(count, region, rng, *params[:max_params])


def load_transmitters(path: Path) -> List[Transmitter]:
    """
    Read transmitters from a whitespace-separated ``x y`` coordinate file.

    Lines with fewer than two tokens, or whose first two tokens are not
    numbers, are skipped with a printed warning.
    """
    transmitters: List[Transmitter] = []
    with path.open() as f:
        for lineno, line in enumerate(f, start=1):
            parts = line.split()
            if len(parts) < 2:
                print(f"[transmitters] skipping line {lineno} of {path}: {line.rstrip()!r}")
                continue
            try:
                x, y = float(parts[0]), float(parts[1])
            except ValueError:
                print(f"[transmitters] skipping line {lineno} of {path}: {line.rstrip()!r}")
                continue
            transmitters.append(Transmitter(len(transmitters), x, y))
    return transmitters


def write_transmitters(path: Path, transmitters: Iterable[Transmitter]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        for tx in transmitters:
            f.write(f"{tx.x:.2f} {tx.y:.2f}\n")


def copy_transmitters(transmitters: Sequence[Transmitter]) -> List[Transmitter]:
    """Fresh transmitters with the same ids and positions but no disks."""
    return [Transmitter(tx.id, tx.x, tx.y) for tx in transmitters]
