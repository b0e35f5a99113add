import pytest

from spatial import QuadTree, UniformGrid


def test_grid_point_buckets_and_neighbourhood():
    grid: UniformGrid[str] = UniformGrid(10.0)
    grid.insert_point("a", 5.0, 5.0)
    grid.insert_point("b", 15.0, 5.0)
    grid.insert_point("c", 35.0, 5.0)

    assert grid.cell_of(5.0, 5.0) == (0, 0)
    assert grid.cell_of(-0.1, 10.0) == (-1, 1)
    assert grid.items_at(1.0, 1.0) == ["a"]
    assert sorted(grid.neighbourhood(5.0, 5.0)) == ["a", "b"]
    assert sorted(grid.neighbourhood(5.0, 5.0, reach=3)) == ["a", "b", "c"]
    assert len(grid) == 3


def test_grid_box_lands_in_every_overlapped_cell():
    grid: UniformGrid[int] = UniformGrid(10.0)
    grid.insert_box(7, (5.0, 5.0, 25.0, 12.0))

    occupied = sorted(cell for cell, items in grid.cells() if 7 in items)
    assert occupied == [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1)]


def test_grid_rejects_non_positive_cell_size():
    with pytest.raises(ValueError):
        UniformGrid(0.0)


def _point(x: float, y: float):
    return (x, y, x, y)


def test_quadtree_splits_past_capacity():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 100.0, 100.0), capacity=2)
    tree.insert(0, _point(10.0, 10.0))
    tree.insert(1, _point(90.0, 10.0))
    assert tree.is_leaf

    tree.insert(2, _point(10.0, 90.0))

    assert not tree.is_leaf
    assert tree.items() == []
    assert sorted(len(leaf.items()) for leaf in tree.leaves()) == [0, 1, 1, 1]


def test_quadtree_keeps_straddling_boxes_in_parent():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 100.0, 100.0), capacity=1)
    tree.insert(0, (40.0, 40.0, 60.0, 60.0))
    tree.insert(1, _point(10.0, 10.0))
    tree.insert(2, _point(80.0, 80.0))

    assert tree.items() == [0]
    assert sorted(tree.query((0.0, 0.0, 50.0, 50.0))) == [0, 1]
    assert tree.query((70.0, 5.0, 95.0, 30.0)) == []
    assert sorted(tree.query((0.0, 0.0, 100.0, 100.0))) == [0, 1, 2]


def test_quadtree_ignores_items_outside_bounds():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 10.0, 10.0))
    assert not tree.insert(0, _point(20.0, 20.0))
    assert tree.items_at(20.0, 20.0) == []


def test_quadtree_items_at_point():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 100.0, 100.0), capacity=1)
    tree.insert(0, (0.0, 0.0, 30.0, 30.0))
    tree.insert(1, (70.0, 70.0, 100.0, 100.0))
    tree.insert(2, (20.0, 20.0, 80.0, 80.0))

    assert tree.items_at(10.0, 10.0) == [0]
    assert sorted(tree.items_at(25.0, 25.0)) == [0, 2]
    assert sorted(tree.items_at(90.0, 90.0)) == [1]
    assert tree.items_at(50.0, 5.0) == []


def test_quadtree_stops_splitting_at_max_depth():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 1.0, 1.0), capacity=1, max_depth=2)
    for i in range(5):
        tree.insert(i, _point(0.1, 0.1))

    depths = [leaf.depth for leaf in tree.leaves()]
    assert max(depths) == 2
    assert sum(len(node.items()) for node in tree.nodes()) == 5


def test_quadtree_stays_shallow_under_heavy_overlap():
    tree: QuadTree[int] = QuadTree((0.0, 0.0, 100.0, 100.0), capacity=4, max_depth=10)
    for i in range(200):
        offset = i * 0.05
        tree.insert(i, (20.0 + offset, 20.0 + offset, 80.0 - offset, 80.0 - offset))

    # Every box straddles the centre, so one split is all that can happen.
    assert len(list(tree.nodes())) == 5
    assert len(tree.items()) == 200
    assert len(tree.overlapping_pairs()) == 200 * 199 // 2


def test_quadtree_overlapping_pairs_across_levels():
    tree: QuadTree[str] = QuadTree((0.0, 0.0, 100.0, 100.0), capacity=1)
    tree.insert("big", (10.0, 10.0, 90.0, 90.0))
    tree.insert("nw", (5.0, 60.0, 20.0, 95.0))
    tree.insert("se", (60.0, 5.0, 95.0, 20.0))
    tree.insert("se2", (85.0, 15.0, 95.0, 25.0))

    pairs = {frozenset(p) for p in tree.overlapping_pairs()}
    assert pairs == {
        frozenset({"big", "nw"}),
        frozenset({"big", "se"}),
        frozenset({"big", "se2"}),
        frozenset({"se", "se2"}),
    }
