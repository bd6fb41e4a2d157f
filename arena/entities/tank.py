"""
Tank entity - the only combat unit of the arena.

A tank is plain mutable state. It never reaches into the board or into
other tanks on its own: every change to life, actions, range or position
goes through the ActionResolver.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict

from infra.logger import get_logger

from ..core.types import GridPos, DEFAULT_ACTIONS, DEFAULT_LIFE, DEFAULT_RANGE

if TYPE_CHECKING:
    from ..world.match import Match

log = get_logger(__name__)


@dataclass
class Tank:
    """
    A player-controlled tank.

    Attributes:
        id: Owner id, immutable and unique within a match
        match_id: Id of the match the tank belongs to (non-owning handle)
        pos: Current board cell
        life: Remaining life, never below 0
        actions: Action points available to spend
        range: Reach of SHOOT, GIVE_ACTION and HEAL
        name: Display name
        picture: Display picture URL
    """

    id: str
    match_id: str
    pos: GridPos = (0, 0)
    life: int = DEFAULT_LIFE
    actions: int = DEFAULT_ACTIONS
    range: int = DEFAULT_RANGE
    name: str = ""
    picture: str = ""

    def __post_init__(self):
        self.pos = (int(self.pos[0]), int(self.pos[1]))
        if self.life < 0:
            raise ValueError(f"Life cannot be negative: {self.life}")
        if self.range <= 0:
            raise ValueError(f"Range must be positive: {self.range}")

    @classmethod
    async def create(cls, match: Match, owner_id: str, name: str, picture: str) -> Tank:
        """
        Spawn a tank with default stats on a random free cell of ``match``.

        The tank is registered on the board and a board snapshot is written.
        Uniqueness of ``owner_id`` is not checked here.

        Raises:
            BoardFullError: If the board has no free cell
        """
        tank = cls.spawn(match, owner_id, name, picture)
        await match.persist_board()
        return tank

    @classmethod
    def spawn(cls, match: Match, owner_id: str, name: str, picture: str) -> Tank:
        """Synchronous part of ``create``: place and register, without persisting."""
        tank = cls(
            id=owner_id,
            match_id=match.id,
            pos=match.board.random_free_cell(match.rng),
            name=name,
            picture=picture,
        )
        match.add_tank(tank)
        log.info("%s joined match %s at %s", tank.label(), match.id, tank.pos)
        return tank

    @property
    def alive(self) -> bool:
        return self.life > 0

    def as_public_view(self) -> Dict[str, str]:
        """Projection that is safe to show to other players."""
        return {
            "id": self.id,
            "picture": self.picture,
            "name": self.name,
        }

    def consume_action_points(self, n: int = 1) -> None:
        """Deduct action points. Callers check sufficiency beforehand."""
        self.actions -= n

    def die(self) -> None:
        """Mark the tank defeated. It keeps its cell on the board."""
        self.actions = 0
        log.info("%s is defeated at %s", self.label(), self.pos)

    def label(self) -> str:
        return f"Tank[{self.name or self.id}]"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "match_id": self.match_id,
            "pos": list(self.pos),
            "life": self.life,
            "actions": self.actions,
            "range": self.range,
            "name": self.name,
            "picture": self.picture,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Tank:
        return cls(
            id=data["id"],
            match_id=data["match_id"],
            pos=tuple(data["pos"]),
            life=data.get("life", DEFAULT_LIFE),
            actions=data.get("actions", DEFAULT_ACTIONS),
            range=data.get("range", DEFAULT_RANGE),
            name=data.get("name", ""),
            picture=data.get("picture", ""),
        )

    def __str__(self) -> str:
        return (f"{self.label()} at {self.pos} "
                f"(life={self.life}, actions={self.actions}, range={self.range})")
