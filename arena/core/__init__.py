"""
Core types, action records and validation for the tank arena.
"""

from .types import (
    GridPos,
    ActionKind,
    ActionValidation,
    DEFAULT_LIFE,
    DEFAULT_RANGE,
    DEFAULT_ACTIONS,
    MOVE_RADIUS,
)
from .actions import Action
from .validation import check_entry_gate, clamp_destination, validate_action_in_match


__all__ = [
    "GridPos",
    "ActionKind",
    "ActionValidation",
    "DEFAULT_LIFE",
    "DEFAULT_RANGE",
    "DEFAULT_ACTIONS",
    "MOVE_RADIUS",
    "Action",
    "check_entry_gate",
    "clamp_destination",
    "validate_action_in_match",
]
