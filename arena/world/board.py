"""
Board - cell occupancy for one match.

Cells hold tank ids, never tank objects: the Match owns the tanks and
resolves ids back to them. Every query takes plain coordinates so the
resolver can work on clamped values directly.
"""

from __future__ import annotations

import json
import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .grid import Grid
from ..core.types import GridPos

if TYPE_CHECKING:
    from ..entities.tank import Tank


class BoardFullError(ValueError):
    """Raised when a free cell is requested from a full board."""


class Board:
    """
    Occupancy map over a Grid.

    Attributes:
        grid: Spatial helper for bounds and distances
    """

    def __init__(self, width: int, height: int):
        self.grid = Grid(width, height)
        self._cells: Dict[GridPos, str] = {}

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    # ========================================================================
    # QUERIES
    # ========================================================================

    def is_within_bounds(self, x: int, y: int) -> bool:
        return self.grid.in_bounds((x, y))

    def is_occupied(self, x: int, y: int) -> bool:
        return (x, y) in self._cells

    def is_within_range(self, origin: GridPos, target: GridPos, radius: int) -> bool:
        return self.grid.in_range(origin, target, radius)

    def get_occupant_id(self, x: int, y: int) -> Optional[str]:
        """Id of the tank on a cell, or None if the cell is empty."""
        return self._cells.get((x, y))

    def free_cells(self) -> List[GridPos]:
        """All unoccupied cells, row by row."""
        return [pos for pos in self.grid.cells() if pos not in self._cells]

    def random_free_cell(self, rng: random.Random) -> GridPos:
        """
        Pick a uniformly random free cell.

        Raises:
            BoardFullError: If every cell is occupied
        """
        free = self.free_cells()
        if not free:
            raise BoardFullError(f"No free cell left on {self.grid}")
        return rng.choice(free)

    def occupied_cells(self) -> Dict[GridPos, str]:
        """Copy of the occupancy map."""
        return dict(self._cells)

    # ========================================================================
    # MUTATION
    # ========================================================================

    def place_tank(self, tank: Tank) -> None:
        """
        Put a tank on its current position.

        Raises:
            ValueError: If the position is off the board or already taken
        """
        if not self.grid.in_bounds(tank.pos):
            raise ValueError(f"Tank position out of bounds: {tank.pos}")
        if tank.pos in self._cells:
            raise ValueError(f"Position already occupied: {tank.pos}")
        self._cells[tank.pos] = tank.id

    def clear_cell(self, x: int, y: int) -> None:
        self._cells.pop((x, y), None)

    def move_tank(self, src: GridPos, dst: GridPos) -> None:
        """
        Move whatever occupies ``src`` onto ``dst``.

        Raises:
            ValueError: If ``src`` is empty or ``dst`` is taken/off the board
        """
        if src not in self._cells:
            raise ValueError(f"No tank to move at {src}")
        if not self.grid.in_bounds(dst):
            raise ValueError(f"Destination out of bounds: {dst}")
        if dst in self._cells:
            raise ValueError(f"Destination already occupied: {dst}")
        self._cells[dst] = self._cells.pop(src)

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [
                {"x": x, "y": y, "tank_id": tank_id}
                for (x, y), tank_id in sorted(self._cells.items())
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Board:
        board = cls(data["width"], data["height"])
        for cell in data.get("cells", []):
            board._cells[(cell["x"], cell["y"])] = cell["tank_id"]
        return board

    def serialize(self) -> str:
        """Opaque JSON snapshot of the board."""
        return json.dumps(self.to_dict(), ensure_ascii=True)

    def __str__(self) -> str:
        return f"Board({self.width}x{self.height}, occupied={len(self._cells)})"
