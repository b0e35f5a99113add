"""
Unit tests for the capture-disk model and disk-disk intersections.
"""

import math
import random

import pytest

from capture import (
    CaptureDisk,
    CaptureModel,
    generate_capture_disk,
    generate_capture_disks,
    intersect_disks,
    solution_points,
)
from geometry import Circle, Point
from transmitters import Transmitter


def _model(beta: float = 0.5, max_range: float = 100.0, size: float = 100.0) -> CaptureModel:
    return CaptureModel(beta=beta, max_range_meters=max_range, universe_width=size, universe_height=size)


def _disk(index: int, cx: float, cy: float, r: float) -> CaptureDisk:
    # Distinct transmitter pair per index so disks never compare equal.
    return CaptureDisk(index, Transmitter(2 * index, 0.0, 0.0), Transmitter(2 * index + 1, 1.0, 1.0), Circle(Point(cx, cy), r))


def test_capture_disk_matches_closed_form():
    t1 = Transmitter(0, 0.0, 0.0)
    t2 = Transmitter(1, 10.0, 0.0)

    disk = generate_capture_disk(t1, t2, _model(beta=0.5))

    assert disk is not None
    # k = 1 - 0.25 = 0.75
    assert disk.circle.center.x == pytest.approx(-2.5 / 0.75)
    assert disk.circle.center.y == pytest.approx(0.0)
    assert disk.circle.radius == pytest.approx(5.0 / 0.75)
    assert disk.captured is t1 and disk.interferer is t2
    assert t1.disks == [disk]
    assert t2.disks == []


def test_capture_disk_boundary_is_apollonius_circle():
    t1 = Transmitter(0, 20.0, 30.0)
    t2 = Transmitter(1, 35.0, 42.0)
    beta = 0.4
    disk = generate_capture_disk(t1, t2, _model(beta=beta))
    assert disk is not None

    for k in range(8):
        theta = k * math.tau / 8
        x = disk.circle.center.x + disk.circle.radius * math.cos(theta)
        y = disk.circle.center.y + disk.circle.radius * math.sin(theta)
        ratio = math.hypot(x - t1.x, y - t1.y) / math.hypot(x - t2.x, y - t2.y)
        assert ratio == pytest.approx(beta)


def test_captured_inside_interferer_outside_for_random_pairs():
    rng = random.Random(7)
    for idx in range(200):
        beta = rng.uniform(0.05, 0.95)
        t1 = Transmitter(0, rng.uniform(0, 100), rng.uniform(0, 100))
        t2 = Transmitter(1, rng.uniform(0, 100), rng.uniform(0, 100))
        disk = generate_capture_disk(t1, t2, _model(beta=beta, max_range=1000.0))
        assert disk is not None
        center = disk.circle.center
        assert center.distance_to(t1.position) < disk.circle.radius
        assert center.distance_to(t2.position) > disk.circle.radius


def test_no_disk_for_same_or_coincident_transmitters():
    model = _model()
    t1 = Transmitter(0, 5.0, 5.0)
    twin = Transmitter(1, 5.0, 5.0)

    assert generate_capture_disk(t1, t1, model) is None
    assert generate_capture_disk(t1, twin, model) is None
    assert t1.disks == []


def test_range_cutoff_prunes_distant_pairs():
    model = _model(max_range=25.0)
    t1 = Transmitter(0, 0.0, 0.0)
    at_cutoff = Transmitter(1, 50.0, 0.0)
    beyond = Transmitter(2, 50.5, 0.0)

    assert generate_capture_disk(t1, at_cutoff, model) is not None
    assert generate_capture_disk(t1, beyond, model) is None


@pytest.mark.parametrize("beta", [0.0, 1.0, 1.5, -0.3])
def test_model_rejects_beta_outside_unit_interval(beta):
    with pytest.raises(ValueError):
        _model(beta=beta)


def test_disks_equal_by_transmitter_pair_only():
    t1 = Transmitter(0, 0.0, 0.0)
    t2 = Transmitter(1, 3.0, 4.0)
    a = CaptureDisk(0, t1, t2, Circle(Point(1.0, 1.0), 2.0))
    b = CaptureDisk(9, t1, t2, Circle(Point(7.0, 7.0), 5.0))
    reverse = CaptureDisk(0, t2, t1, Circle(Point(1.0, 1.0), 2.0))

    assert a == b
    assert hash(a) == hash(b)
    assert a != reverse


def test_generate_capture_disks_over_all_ordered_pairs():
    txers = [Transmitter(0, 10.0, 10.0), Transmitter(1, 20.0, 10.0), Transmitter(2, 15.0, 20.0)]
    disks = generate_capture_disks(txers, _model())

    assert len(disks) == 6
    assert [d.index for d in disks] == list(range(6))
    assert [d.pair for d in disks] == [(0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1)]
    assert all(len(tx.disks) == 2 for tx in txers)


def test_two_point_intersection_lies_on_both_boundaries():
    c1 = _disk(0, 50.0, 50.0, 10.0)
    c2 = _disk(1, 60.0, 50.0, 10.0)

    points = intersect_disks(c1, c2, _model())

    assert len(points) == 2
    assert sorted(points) == [Point(55.0, pytest.approx(50 - math.sqrt(75))), Point(55.0, pytest.approx(50 + math.sqrt(75)))]
    for p in points:
        assert p.distance_to(c1.circle.center) == pytest.approx(10.0)
        assert p.distance_to(c2.circle.center) == pytest.approx(10.0)


def test_random_overlapping_circles_yield_two_points():
    model = _model(size=1000.0)
    rng = random.Random(3)
    checked = 0
    while checked < 100:
        c1 = _disk(0, rng.uniform(400, 600), rng.uniform(400, 600), rng.uniform(10, 80))
        c2 = _disk(1, rng.uniform(400, 600), rng.uniform(400, 600), rng.uniform(10, 80))
        d = c1.circle.center.distance_to(c2.circle.center)
        r1, r2 = c1.circle.radius, c2.circle.radius
        if not abs(r1 - r2) + 1e-6 < d < r1 + r2 - 1e-6:
            continue
        points = intersect_disks(c1, c2, model)
        assert len(points) == 2
        for p in points:
            assert abs(p.distance_to(c1.circle.center) - r1) < 1e-7
            assert abs(p.distance_to(c2.circle.center) - r2) < 1e-7
        checked += 1


@pytest.mark.parametrize(
    "second",
    [
        (75.0, 50.0, 10.0),  # apart
        (70.0, 50.0, 10.0),  # externally tangent
        (52.0, 50.0, 3.0),   # nested
        (55.0, 50.0, 5.0),   # internally tangent
        (50.0, 50.0, 10.0),  # coincident circle, different pair
        (50.0, 50.0, 4.0),   # concentric
    ],
)
def test_no_intersections_when_not_properly_overlapping(second):
    c1 = _disk(0, 50.0, 50.0, 10.0)
    c2 = _disk(1, *second)
    assert intersect_disks(c1, c2, _model()) == []


def test_same_disk_has_no_self_intersections():
    c1 = _disk(0, 50.0, 50.0, 10.0)
    assert intersect_disks(c1, c1, _model()) == []


def test_intersections_outside_universe_are_discarded():
    c1 = _disk(0, 50.0, 5.0, 10.0)
    c2 = _disk(1, 60.0, 5.0, 10.0)

    points = intersect_disks(c1, c2, _model())

    assert len(points) == 1
    assert points[0].x == pytest.approx(55.0)
    assert points[0].y == pytest.approx(5.0 + math.sqrt(75))


def test_solution_points_are_centers_plus_intersections_sorted():
    c1 = _disk(0, 50.0, 50.0, 10.0)
    c2 = _disk(1, 60.0, 50.0, 10.0)
    outside = _disk(2, -20.0, 50.0, 1.0)

    points = solution_points([c1, c2, outside], _model())

    assert len(points) == 4
    assert points == sorted(points)
    assert Point(50.0, 50.0) in points
    assert Point(60.0, 50.0) in points
    assert Point(-20.0, 50.0) not in points
