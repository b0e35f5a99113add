"""
Adaptive quadtree bucketing.

A node splits into four quadrants once it holds more than ``capacity``
items and is shallower than ``max_depth``, so dense regions end up with
small cells and sparse regions with large ones. Items are closed boxes and
each one lives in exactly one node: the deepest node whose bounds contain
its whole box. Boxes straddling a quadrant boundary stay in the parent, so
heavily overlapping large boxes never drive the tree to ``max_depth``.
"""

from __future__ import annotations

from typing import Generic, Iterator, List, Optional, Set, Tuple, TypeVar

T = TypeVar("T")

Box = Tuple[float, float, float, float]


def _overlaps(a: Box, b: Box) -> bool:
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def _contains(outer: Box, inner: Box) -> bool:
    return outer[0] <= inner[0] and outer[1] <= inner[1] and inner[2] <= outer[2] and inner[3] <= outer[3]


class QuadTree(Generic[T]):
    """Region quadtree over the closed box ``bounds``."""

    def __init__(self, bounds: Box, capacity: int = 16, max_depth: int = 10, depth: int = 0) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.bounds = bounds
        self.capacity = capacity
        self.max_depth = max_depth
        self.depth = depth
        self._items: List[Tuple[T, Box]] = []
        self._children: Optional[List[QuadTree[T]]] = None

    @property
    def is_leaf(self) -> bool:
        return self._children is None

    # --- Mutation API ---------------------------------------------------------

    def insert(self, item: T, box: Box) -> bool:
        """Add ``item``; returns False when its box misses this tree entirely."""
        if not _overlaps(self.bounds, box):
            return False
        child = self._child_containing(box)
        if child is not None:
            return child.insert(item, box)

        self._items.append((item, box))
        if self._children is None and len(self._items) > self.capacity and self.depth < self.max_depth:
            self._split()
        return True

    def _child_containing(self, box: Box) -> Optional[QuadTree[T]]:
        if self._children is None:
            return None
        for child in self._children:
            if _contains(child.bounds, box):
                return child
        return None

    def _split(self) -> None:
        min_x, min_y, max_x, max_y = self.bounds
        mid_x = (min_x + max_x) / 2
        mid_y = (min_y + max_y) / 2
        quadrants = (
            (min_x, min_y, mid_x, mid_y),
            (mid_x, min_y, max_x, mid_y),
            (min_x, mid_y, mid_x, max_y),
            (mid_x, mid_y, max_x, max_y),
        )
        self._children = [
            QuadTree(q, self.capacity, self.max_depth, self.depth + 1) for q in quadrants
        ]
        items, self._items = self._items, []
        for item, box in items:
            child = self._child_containing(box)
            if child is not None:
                child.insert(item, box)
            else:
                self._items.append((item, box))

    # --- Queries --------------------------------------------------------------

    def query(self, box: Box) -> List[T]:
        """Items whose box overlaps ``box``, parents before children."""
        found: List[T] = []
        self._collect(box, found)
        return found

    def items_at(self, x: float, y: float) -> List[T]:
        """Items whose box contains the point (x, y)."""
        return self.query((x, y, x, y))

    def overlapping_pairs(self) -> Set[Tuple[T, T]]:
        """
        Unordered item pairs with overlapping boxes.

        Two boxes held in disjoint subtrees can at most touch along a
        quadrant edge, so only pairs within one node and pairs between a
        node and its descendants are compared.
        """
        pairs: Set[Tuple[T, T]] = set()
        self._collect_pairs([], pairs)
        return pairs

    def leaves(self) -> Iterator[QuadTree[T]]:
        if self._children is None:
            yield self
            return
        for child in self._children:
            yield from child.leaves()

    def nodes(self) -> Iterator[QuadTree[T]]:
        yield self
        for child in self._children or ():
            yield from child.nodes()

    def items(self) -> List[T]:
        """Items held by this node itself."""
        return [item for item, _ in self._items]

    def _collect(self, box: Box, found: List[T]) -> None:
        if not _overlaps(self.bounds, box):
            return
        found.extend(item for item, item_box in self._items if _overlaps(item_box, box))
        for child in self._children or ():
            child._collect(box, found)

    def _collect_pairs(self, ancestors: List[Tuple[T, Box]], pairs: Set[Tuple[T, T]]) -> None:
        for a in range(len(self._items)):
            item, box = self._items[a]
            for other, other_box in ancestors:
                if _overlaps(box, other_box):
                    pairs.add((other, item))
            for b in range(a + 1, len(self._items)):
                other, other_box = self._items[b]
                if _overlaps(box, other_box):
                    pairs.add((item, other))
        if self._children is not None:
            below = ancestors + self._items
            for child in self._children:
                child._collect_pairs(below, pairs)
