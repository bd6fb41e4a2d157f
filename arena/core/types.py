"""
Core type definitions for the tank arena.

This module contains the fundamental types, enums, and constants used
throughout the engine. No logic, just pure data structures.
"""

from __future__ import annotations
from enum import Enum
from typing import Tuple
from dataclasses import dataclass

# ============================================================================
# SPATIAL TYPES
# ============================================================================

# Board cell: (x, y) with 0 <= x < COLS and 0 <= y < ROWS.
GridPos = Tuple[int, int]


# ============================================================================
# TANK DEFAULTS
# ============================================================================

DEFAULT_LIFE = 3
DEFAULT_RANGE = 2
DEFAULT_ACTIONS = 0

# Movement is always limited to the cells around the tank.
MOVE_RADIUS = 1


# ============================================================================
# ACTIONS
# ============================================================================

class ActionKind(Enum):
    """
    Kinds of actions a tank can spend action points on.

    The value is the label used in audit records and on the wire.
    """
    MOVE = "move"
    SHOOT = "shoot"
    GIVE_ACTION = "give-action"
    UPGRADE = "upgrade"
    HEAL = "heal"

    def __str__(self) -> str:
        return self.name

    @property
    def label(self) -> str:
        """Audit/broadcast label for this kind."""
        return self.value

    @property
    def cost(self) -> int:
        """Action points deducted after a successful resolution."""
        return 3 if self in (ActionKind.UPGRADE, ActionKind.HEAL) else 1

    @property
    def needs_destination(self) -> bool:
        """Whether the action targets a board cell."""
        return self != ActionKind.UPGRADE

    @classmethod
    def from_label(cls, raw: str) -> ActionKind:
        """
        Parse a kind from its label or enum name.

        Accepts "give-action", "GIVE_ACTION" and "give_action" alike.

        Raises:
            ValueError: If the label matches no kind
        """
        normalized = raw.strip().lower().replace("_", "-")
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown action kind: {raw!r}")


# ============================================================================
# ACTION VALIDATION
# ============================================================================

@dataclass
class ActionValidation:
    """
    Structured result of validating an action.

    Rejections are an expected gameplay outcome, not an error. This object
    only exists so the reason can be logged or shown to a player.

    Attributes:
        valid: Whether the action is legal
        error_code: Machine-readable reason (None if valid)
        message: Human-readable explanation

    Error codes:
        - "NO_ACTIONS": Tank has no action points left
        - "DEFEATED": Tank has no life left
        - "INSUFFICIENT_ACTIONS": Kind costs more than the tank holds
        - "MISSING_DESTINATION": Kind needs a target cell and none was given
        - "OUT_OF_BOUNDS": Target cell is off the board
        - "OCCUPIED": MOVE target is taken
        - "EMPTY_CELL": Targeted kind aimed at an empty cell
        - "SELF_TARGET": SHOOT/GIVE_ACTION aimed at the tank's own cell
        - "OUT_OF_RANGE": Target is farther than the allowed radius
        - "TARGET_DEFEATED": Target tank has no life left
    """
    valid: bool
    error_code: str | None = None
    message: str = ""

    @staticmethod
    def success(message: str = "") -> ActionValidation:
        """Create a validation success result."""
        return ActionValidation(valid=True, error_code=None, message=message)

    @staticmethod
    def fail(error_code: str, message: str) -> ActionValidation:
        """Create a validation failure result."""
        return ActionValidation(valid=False, error_code=error_code, message=message)
