import math

import pytest

from geometry import Circle, Point, in_rectangle


def test_point_ordering_and_distance():
    assert Point(1.0, 5.0) < Point(2.0, 0.0)
    assert Point(1.0, 1.0) < Point(1.0, 2.0)
    assert Point(0.0, 0.0).distance_to(Point(3.0, 4.0)) == 5.0


def test_points_deduplicate_by_value():
    assert len({Point(1.5, 2.5), Point(1.5, 2.5), Point(2.5, 1.5)}) == 2


def test_containment_is_boundary_inclusive():
    circle = Circle(Point(0.0, 0.0), 5.0)
    assert circle.contains(Point(0.0, 0.0))
    assert circle.contains(Point(3.0, 4.0))
    assert circle.contains(Point(5.0 * math.cos(1.0), 5.0 * math.sin(1.0)))
    assert not circle.contains(Point(3.0, 4.001))


def test_negative_radius_rejected():
    with pytest.raises(ValueError):
        Circle(Point(0.0, 0.0), -1.0)


def test_circle_bounding_box():
    a = Circle(Point(1.0, 2.0), 3.0)
    assert a.bounding_box() == (-2.0, -1.0, 4.0, 5.0)


def test_in_rectangle_is_closed():
    assert in_rectangle(Point(0.0, 0.0), 10.0, 5.0)
    assert in_rectangle(Point(10.0, 5.0), 10.0, 5.0)
    assert not in_rectangle(Point(10.01, 5.0), 10.0, 5.0)
    assert not in_rectangle(Point(-0.01, 1.0), 10.0, 5.0)
