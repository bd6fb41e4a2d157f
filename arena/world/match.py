"""
Match - one arena game.

The Match owns everything the resolver works on:
- The board (occupancy) and its grid
- The tanks, keyed by owner id
- The heart pickup
- The ordered audit log and its listeners
- The lock that serializes action resolution
- An optional snapshot store for durability

Tanks only keep the match id; the match is always passed explicitly.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from infra.logger import get_logger

from .board import Board
from .grid import Grid
from ..core.types import ActionKind, GridPos
from ..entities.tank import Tank
from ..storage.snapshots import SnapshotError
from ..utils.id_generator import IDGenerator

if TYPE_CHECKING:
    from ..storage.snapshots import SnapshotStore

log = get_logger(__name__)


class MatchContractError(RuntimeError):
    """A caller addressed a match with a tank that does not belong to it."""


@dataclass
class ActionRecord:
    """
    Audit entry for one committed action.

    Attributes:
        sequence: Commit order within the match, starting at 1
        actor_id: Tank that acted
        kind: What it did
        destination: Target cell, if the action had one
        affected_id: Tank on the receiving end, if another tank was touched
        timestamp: Wall-clock commit time
    """
    sequence: int
    actor_id: str
    kind: ActionKind
    destination: Optional[GridPos] = None
    affected_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "actor_id": self.actor_id,
            "kind": self.kind.label,
            "destination": list(self.destination) if self.destination is not None else None,
            "affected_id": self.affected_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ActionRecord:
        destination = data.get("destination")
        return cls(
            sequence=data["sequence"],
            actor_id=data["actor_id"],
            kind=ActionKind.from_label(data["kind"]),
            destination=tuple(destination) if destination is not None else None,
            affected_id=data.get("affected_id"),
            timestamp=data.get("timestamp", 0.0),
        )


ActionListener = Callable[[ActionRecord], Awaitable[None]]


class Match:
    """
    State of a single match.

    Attributes:
        id: Match identifier, threaded through persistence
        board: Occupancy map
        rng: Random source for spawn and heart cells
        lock: Serialization point for action resolution
        store: Snapshot store (None disables persistence)
    """

    def __init__(
            self,
            match_id: str,
            width: int,
            height: int,
            seed: Optional[int] = None,
            store: Optional[SnapshotStore] = None,
    ):
        self.id = match_id
        self.board = Board(width, height)
        self.rng = random.Random(seed)
        self.store = store
        self.lock = asyncio.Lock()

        self._tanks: Dict[str, Tank] = {}
        self._heart: Optional[GridPos] = None
        self._log: List[ActionRecord] = []
        self._sequence = IDGenerator()
        self._listeners: List[ActionListener] = []

    @property
    def grid(self) -> Grid:
        return self.board.grid

    # ========================================================================
    # TANKS
    # ========================================================================

    def add_tank(self, tank: Tank) -> None:
        """
        Register a tank and place it on the board.

        Raises:
            MatchContractError: If the tank was created for another match
            ValueError: If its cell is off the board or occupied
        """
        if tank.match_id != self.id:
            raise MatchContractError(f"{tank.label()} belongs to match {tank.match_id}, not {self.id}")
        self.board.place_tank(tank)
        self._tanks[tank.id] = tank

    def get_tank(self, tank_id: str) -> Optional[Tank]:
        return self._tanks.get(tank_id)

    def get_all_tanks(self) -> List[Tank]:
        """All tanks, defeated ones included."""
        return list(self._tanks.values())

    def get_alive_tanks(self) -> List[Tank]:
        return [t for t in self._tanks.values() if t.alive]

    def get_occupant(self, pos: GridPos) -> Optional[Tank]:
        tank_id = self.board.get_occupant_id(*pos)
        if tank_id is None:
            return None
        return self._tanks.get(tank_id)

    def owns(self, tank: Tank) -> bool:
        """Whether ``tank`` is the instance registered under its id here."""
        return tank.match_id == self.id and self._tanks.get(tank.id) is tank

    # ========================================================================
    # HEART PICKUP
    # ========================================================================

    @property
    def heart_location(self) -> Optional[GridPos]:
        return self._heart

    def place_heart(self, pos: Optional[GridPos] = None) -> GridPos:
        """
        Put the heart pickup on ``pos`` or on a random free cell.

        Raises:
            ValueError: If ``pos`` is off the board or occupied
            BoardFullError: If no free cell is left
        """
        if pos is None:
            pos = self.board.random_free_cell(self.rng)
        else:
            pos = (int(pos[0]), int(pos[1]))
            if not self.board.is_within_bounds(*pos):
                raise ValueError(f"Heart position out of bounds: {pos}")
            if self.board.is_occupied(*pos):
                raise ValueError(f"Heart position occupied: {pos}")
        self._heart = pos
        log.info("Heart placed at %s in match %s", pos, self.id)
        return pos

    def clear_heart(self) -> None:
        self._heart = None

    # ========================================================================
    # AUDIT LOG
    # ========================================================================

    def subscribe(self, listener: ActionListener) -> None:
        """Receive every ActionRecord after it is appended."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: ActionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def action_log(self) -> List[ActionRecord]:
        return list(self._log)

    async def record_action(
            self,
            actor: Tank,
            kind: ActionKind,
            destination: Optional[GridPos] = None,
            affected: Optional[Tank] = None,
    ) -> ActionRecord:
        """
        Append an audit entry and notify listeners in subscription order.

        The entry is appended before the first await, so log order always
        matches the order of calls. A failing listener is logged and skipped.
        """
        record = ActionRecord(
            sequence=self._sequence.next_id(),
            actor_id=actor.id,
            kind=kind,
            destination=destination,
            affected_id=affected.id if affected is not None else None,
        )
        self._log.append(record)
        log.info(
            "match=%s #%d %s %s dest=%s affected=%s",
            self.id, record.sequence, actor.label(), kind.label, destination, record.affected_id,
        )

        for listener in list(self._listeners):
            try:
                await listener(record)
            except Exception:
                log.exception("Action listener failed for match %s record #%d", self.id, record.sequence)

        return record

    # ========================================================================
    # PERSISTENCE
    # ========================================================================

    async def persist_board(self) -> bool:
        """
        Write the current snapshot to the store.

        The snapshot is taken synchronously, before any await. A failed write
        is logged and reported as False; in-memory state is never rolled back.
        """
        if self.store is None:
            return False

        snapshot = self.to_dict()
        try:
            await self.store.save(self.id, snapshot)
        except SnapshotError as exc:
            log.warning("Snapshot of match %s not persisted: %s", self.id, exc)
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize match state.

        Listeners, the lock and the store are runtime wiring and are not
        part of the snapshot.
        """
        return {
            "id": self.id,
            "board": self.board.to_dict(),
            "tanks": [tank.to_dict() for tank in self._tanks.values()],
            "heart": list(self._heart) if self._heart is not None else None,
            "log": [record.to_dict() for record in self._log],
            "rng_state": self.rng.getstate(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], store: Optional[SnapshotStore] = None) -> Match:
        """Rebuild a match from ``to_dict()`` output."""
        board_data = data["board"]
        match = cls(data["id"], board_data["width"], board_data["height"], store=store)

        for tank_data in data.get("tanks", []):
            tank = Tank.from_dict(tank_data)
            match._tanks[tank.id] = tank
        match.board = Board.from_dict(board_data)

        heart = data.get("heart")
        match._heart = tuple(heart) if heart is not None else None

        match._log = [ActionRecord.from_dict(r) for r in data.get("log", [])]
        if match._log:
            match._sequence.reset(match._log[-1].sequence + 1)

        # JSON turns the RNG state tuples into lists
        rng_state = data.get("rng_state")
        if rng_state is not None:
            inner = tuple(rng_state[1]) if isinstance(rng_state[1], list) else rng_state[1]
            match.rng.setstate((rng_state[0], inner, rng_state[2]))

        return match

    def __str__(self) -> str:
        alive = len(self.get_alive_tanks())
        return f"Match({self.id}, tanks={alive}/{len(self._tanks)}, board={self.board})"
