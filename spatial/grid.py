"""
Uniform grid bucketing.

Items are stored per square cell of side ``cell_size``. A point item lives in
exactly one cell; a box item lives in every cell its box overlaps. Cells are
kept in a sparse dict, so items outside any nominal bounds are fine.
"""

from typing import Dict, Generic, Iterable, Iterator, List, Tuple, TypeVar
import math

T = TypeVar("T")

Cell = Tuple[int, int]
Box = Tuple[float, float, float, float]


class UniformGrid(Generic[T]):
    """Sparse uniform grid of item buckets."""

    def __init__(self, cell_size: float, origin: Tuple[float, float] = (0.0, 0.0)) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.origin = origin
        self._cells: Dict[Cell, List[T]] = {}

    def cell_of(self, x: float, y: float) -> Cell:
        return (
            math.floor((x - self.origin[0]) / self.cell_size),
            math.floor((y - self.origin[1]) / self.cell_size),
        )

    # --- Mutation API ---------------------------------------------------------

    def insert_point(self, item: T, x: float, y: float) -> None:
        self._cells.setdefault(self.cell_of(x, y), []).append(item)

    def insert_box(self, item: T, box: Box) -> None:
        """Add ``item`` to every cell overlapping the closed box (min_x, min_y, max_x, max_y)."""
        lo_i, lo_j = self.cell_of(box[0], box[1])
        hi_i, hi_j = self.cell_of(box[2], box[3])
        for i in range(lo_i, hi_i + 1):
            for j in range(lo_j, hi_j + 1):
                self._cells.setdefault((i, j), []).append(item)

    # --- Queries --------------------------------------------------------------

    def items_at(self, x: float, y: float) -> List[T]:
        """Items bucketed in the cell containing (x, y)."""
        return self._cells.get(self.cell_of(x, y), [])

    def neighbourhood(self, x: float, y: float, reach: int = 1) -> Iterator[T]:
        """Items in the cell of (x, y) and the cells up to ``reach`` steps around it."""
        ci, cj = self.cell_of(x, y)
        for i in range(ci - reach, ci + reach + 1):
            for j in range(cj - reach, cj + reach + 1):
                yield from self._cells.get((i, j), ())

    def cells(self) -> Iterable[Tuple[Cell, List[T]]]:
        return self._cells.items()

    def __len__(self) -> int:
        return len(self._cells)
