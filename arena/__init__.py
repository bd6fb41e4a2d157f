"""
Tank arena - rules engine for a turn-based grid combat game.

Tanks on a bounded board spend action points to move, shoot, hand out
action points, upgrade their range or heal. The engine validates each
request against the match state, applies it atomically and records it.

Usage:
    from arena import Action, ActionResolver, Match, Tank

    match = Match("m1", width=12, height=12, seed=7)
    tank = await Tank.create(match, "alice", "Alice", "")
    tank.actions = 3
    applied = await ActionResolver().apply_action(match, tank, Action.upgrade())
"""

from .core import Action, ActionKind, ActionValidation, GridPos
from .entities import Tank
from .world import ActionRecord, Board, BoardFullError, Grid, Match, MatchContractError
from .mechanics import ActionResolver, ResolutionResult
from .storage import SnapshotError, SnapshotStore

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionKind",
    "ActionValidation",
    "GridPos",
    "Tank",
    "ActionRecord",
    "Board",
    "BoardFullError",
    "Grid",
    "Match",
    "MatchContractError",
    "ActionResolver",
    "ResolutionResult",
    "SnapshotError",
    "SnapshotStore",
]
