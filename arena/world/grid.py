"""
Grid - Spatial logic for the arena.

The Grid handles:
- Coordinate validation and clamping
- Distance calculations
- Cell enumeration

Distance between cells is Chebyshev (king-move) distance: the eight cells
around a tank are all at distance 1. Range checks for MOVE, SHOOT,
GIVE_ACTION and HEAL all use it.
"""

from __future__ import annotations
from typing import Iterator
from ..core.types import GridPos


class Grid:
    """
    A bounded 2D grid of ``width`` columns and ``height`` rows.

    Provides spatial queries without game logic or state.

    Attributes:
        width: Grid width (COLS)
        height: Grid height (ROWS)
    """

    def __init__(self, width: int, height: int):
        """
        Initialize a grid.

        Raises:
            ValueError: If dimensions are not positive
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive: {width}x{height}")

        self.width = width
        self.height = height

    def in_bounds(self, pos: GridPos) -> bool:
        """Check if a position is within grid boundaries."""
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def clamp(self, pos: GridPos) -> GridPos:
        """Clamp each axis of a position into the grid."""
        x, y = pos
        return (
            max(0, min(self.width - 1, x)),
            max(0, min(self.height - 1, y)),
        )

    def distance(self, a: GridPos, b: GridPos) -> int:
        """Chebyshev distance between two positions."""
        return max(abs(a[0] - b[0]), abs(a[1] - b[1]))

    def in_range(self, origin: GridPos, target: GridPos, radius: int) -> bool:
        """Whether ``target`` lies within ``radius`` of ``origin``."""
        return self.distance(origin, target) <= radius

    def cells(self) -> Iterator[GridPos]:
        """Iterate all cells row by row."""
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    def __str__(self) -> str:
        return f"Grid({self.width}x{self.height})"

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height})"
