"""
Board and match state for the tank arena.

This module provides:
- Grid: Spatial logic and geometry
- Board: Cell occupancy
- Match: Tanks, heart pickup, audit log and serialization
"""

from .grid import Grid
from .board import Board, BoardFullError
from .match import ActionRecord, Match, MatchContractError

__all__ = [
    "Grid",
    "Board",
    "BoardFullError",
    "ActionRecord",
    "Match",
    "MatchContractError",
]
