"""
Shared action validation.

The resolver and any "can this tank do that?" query go through the same
function, so a legal-looking action in a UI can never be rejected by the
engine (or the other way around). Validation is read-only.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from .types import ActionKind, ActionValidation, GridPos, MOVE_RADIUS

if TYPE_CHECKING:
    from ..world.grid import Grid
    from ..world.match import Match
    from ..entities.tank import Tank
    from .actions import Action


def clamp_destination(grid: Grid, pos: GridPos) -> GridPos:
    """
    Pull a requested cell onto the board.

    Each axis is clamped with ``max(0, min(dim - 1, v))``, so an off-board
    request is redirected to the nearest edge cell instead of rejected.
    """
    return grid.clamp(pos)


def check_entry_gate(tank: Tank) -> ActionValidation:
    """An exhausted or defeated tank cannot act at all."""
    if tank.actions <= 0:
        return ActionValidation.fail("NO_ACTIONS", f"{tank.label()} has no action points")
    if tank.life <= 0:
        return ActionValidation.fail("DEFEATED", f"{tank.label()} is defeated")
    return ActionValidation.success()


def validate_action_in_match(match: Match, tank: Tank, action: Action) -> ActionValidation:
    """
    Validate an action against the tank and the current match state.

    Order: entry gate, destination clamping, then the kind-specific checks.
    """
    gate = check_entry_gate(tank)
    if not gate.valid:
        return gate

    kind = action.kind

    if kind == ActionKind.UPGRADE:
        return _check_cost(tank, kind)

    if action.destination is None:
        return ActionValidation.fail("MISSING_DESTINATION", f"{kind.name} needs a destination")

    target = clamp_destination(match.grid, action.destination)
    board = match.board

    if not board.is_within_bounds(*target):
        return ActionValidation.fail("OUT_OF_BOUNDS", f"{target} is off the board")

    if kind == ActionKind.MOVE:
        if board.is_occupied(*target):
            return ActionValidation.fail("OCCUPIED", f"{tank.label()} cannot move onto occupied {target}")
        if not board.is_within_range(tank.pos, target, MOVE_RADIUS):
            return ActionValidation.fail("OUT_OF_RANGE", f"{tank.label()} cannot reach {target} in one step")
        return ActionValidation.success()

    if not board.is_occupied(*target):
        return ActionValidation.fail("EMPTY_CELL", f"no tank at {target}")

    if kind in (ActionKind.SHOOT, ActionKind.GIVE_ACTION):
        if target == tank.pos:
            return ActionValidation.fail("SELF_TARGET", f"{tank.label()} cannot {kind.label} itself")
        if not board.is_within_range(tank.pos, target, tank.range):
            return ActionValidation.fail(
                "OUT_OF_RANGE",
                f"{target} is beyond range {tank.range} of {tank.label()}"
            )
        occupant = match.get_occupant(target)
        if occupant is None or not occupant.alive:
            return ActionValidation.fail("TARGET_DEFEATED", f"tank at {target} is defeated")
        return ActionValidation.success()

    if kind == ActionKind.HEAL:
        if not board.is_within_range(tank.pos, target, tank.range):
            return ActionValidation.fail(
                "OUT_OF_RANGE",
                f"{target} is beyond range {tank.range} of {tank.label()}"
            )
        return _check_cost(tank, kind)

    raise ValueError(f"Unhandled action kind: {kind!r}")


def _check_cost(tank: Tank, kind: ActionKind) -> ActionValidation:
    if tank.actions < kind.cost:
        return ActionValidation.fail(
            "INSUFFICIENT_ACTIONS",
            f"{tank.label()} needs {kind.cost} actions for {kind.name}, has {tank.actions}"
        )
    return ActionValidation.success()
