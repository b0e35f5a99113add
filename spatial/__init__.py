"""Spatial bucketing structures used by the partitioned experiment variants."""

from .grid import UniformGrid
from .quadtree import QuadTree

__all__ = [
    "UniformGrid",
    "QuadTree",
]
