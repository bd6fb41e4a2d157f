"""
Action records.

An Action is both the request handed to the resolver and the canonical
record returned once it has been applied. On success the resolver fills in
the clamped destination and, for kinds that touch another tank, the
affected tank.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional
import json

from .types import ActionKind, GridPos

if TYPE_CHECKING:
    from ..entities.tank import Tank


@dataclass
class Action:
    """
    A tank action.

    Use the static factory methods for convenient construction:
        - Action.move((x, y))
        - Action.shoot((x, y))
        - Action.give_action((x, y))
        - Action.upgrade()
        - Action.heal((x, y))

    Attributes:
        kind: What the tank does
        destination: Target cell (None only for UPGRADE)
        affected: Tank on the receiving end, filled in by the resolver
    """

    kind: ActionKind
    destination: Optional[GridPos] = None
    affected: Optional[Tank] = None

    def __post_init__(self):
        if self.destination is not None:
            x, y = self.destination
            self.destination = (int(x), int(y))
        if self.kind.needs_destination and self.destination is None:
            raise ValueError(f"{self.kind.name} action requires a destination")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert action to a JSON-serializable dictionary.

        The affected tank is embedded with its full state so clients can
        update their view from the broadcast alone.
        """
        return {
            "kind": self.kind.label,
            "destination": list(self.destination) if self.destination is not None else None,
            "affected": self.affected.to_dict() if self.affected is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Action:
        """
        Create an action request from a dictionary.

        Only ``kind`` and ``destination`` are read: the affected tank is
        always decided by the resolver, never by the caller.

        Raises:
            ValueError: If the dictionary format is invalid
        """
        if "kind" not in data:
            raise ValueError("Action dictionary must contain 'kind'")

        kind = ActionKind.from_label(str(data["kind"]))
        raw_dest = data.get("destination")
        destination = None
        if raw_dest is not None:
            if isinstance(raw_dest, dict):
                destination = (raw_dest["x"], raw_dest["y"])
            else:
                if len(raw_dest) != 2:
                    raise ValueError(f"Destination must be an (x, y) pair, got {raw_dest!r}")
                destination = (raw_dest[0], raw_dest[1])

        return cls(kind=kind, destination=destination)

    def to_json(self) -> str:
        """Convert action to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> Action:
        """Create action from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def __str__(self) -> str:
        if self.destination is None:
            return self.kind.name
        return f"{self.kind.name} {self.destination}"

    # FACTORY METHODS
    @staticmethod
    def move(destination: GridPos) -> Action:
        """Move to an adjacent free cell."""
        return Action(ActionKind.MOVE, destination)

    @staticmethod
    def shoot(destination: GridPos) -> Action:
        """Shoot the tank standing on a cell within range."""
        return Action(ActionKind.SHOOT, destination)

    @staticmethod
    def give_action(destination: GridPos) -> Action:
        """Hand one action point to the tank on a cell within range."""
        return Action(ActionKind.GIVE_ACTION, destination)

    @staticmethod
    def upgrade() -> Action:
        """Increase own range by one."""
        return Action(ActionKind.UPGRADE)

    @staticmethod
    def heal(destination: GridPos) -> Action:
        """Restore one life to the tank on a cell within range (own cell included)."""
        return Action(ActionKind.HEAL, destination)
