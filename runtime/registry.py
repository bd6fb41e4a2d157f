from __future__ import annotations

from typing import Dict, List, Optional

from arena.core.actions import Action
from arena.core.types import GridPos
from arena.entities.tank import Tank
from arena.mechanics import ActionResolver, ResolutionResult
from arena.storage import SnapshotStore
from arena.utils import new_match_id
from arena.world import Match
from infra.logger import get_logger
from infra.settings import Settings, get_settings

log = get_logger(__name__)


class MatchRegistry:
    """
    In-process home of the running matches.

    Every call names its match explicitly; there is no implicit "active"
    match. Matches are independent, each serialized by its own lock.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: SnapshotStore | None = None,
        resolver: ActionResolver | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else SnapshotStore.from_settings(self.settings)
        self.resolver = resolver or ActionResolver()
        self._matches: Dict[str, Match] = {}

    # ------------------------------------------------------------------#
    # Matches
    # ------------------------------------------------------------------#
    async def create_match(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: Optional[int] = None,
        match_id: Optional[str] = None,
    ) -> Match:
        match_id = match_id or new_match_id()
        if match_id in self._matches:
            raise ValueError(f"Match {match_id} already exists")

        match = Match(
            match_id,
            width or self.settings.board_cols,
            height or self.settings.board_rows,
            seed=seed if seed is not None else self.settings.seed,
            store=self.store,
        )
        self._matches[match_id] = match
        await match.persist_board()

        log.info("Created %s", match)
        return match

    def get_match(self, match_id: str) -> Match:
        """
        Raises:
            KeyError: If no such match is running
        """
        try:
            return self._matches[match_id]
        except KeyError:
            raise KeyError(f"Unknown match {match_id}") from None

    def list_matches(self) -> List[str]:
        return list(self._matches)

    async def restore(self, match_id: str) -> Match:
        """
        Reload a match from its last snapshot, replacing any in-memory copy.

        Raises:
            KeyError: If no snapshot exists
        """
        data = self.store.load(match_id)
        if data is None:
            raise KeyError(f"No snapshot for match {match_id}")
        match = Match.from_dict(data, store=self.store)
        self._matches[match_id] = match
        log.info("Restored %s", match)
        return match

    async def place_heart(self, match_id: str, pos: Optional[GridPos] = None) -> GridPos:
        """Place the heart pickup while holding the match lock."""
        match = self.get_match(match_id)
        async with match.lock:
            return match.place_heart(pos)

    def close(self, match_id: str) -> None:
        self._matches.pop(match_id, None)
        log.info("Closed match %s", match_id)

    # ------------------------------------------------------------------#
    # Players
    # ------------------------------------------------------------------#
    async def join(self, match_id: str, owner_id: str, name: str = "", picture: str = "") -> Tank:
        """Spawn a tank for ``owner_id``; joining twice returns the same tank."""
        match = self.get_match(match_id)
        async with match.lock:
            existing = match.get_tank(owner_id)
            if existing is not None:
                return existing
            tank = Tank.spawn(match, owner_id, name, picture)

        # Snapshot is written after the lock is released.
        await match.persist_board()
        return tank

    async def submit(self, match_id: str, owner_id: str, action: Action) -> ResolutionResult:
        """
        Resolve an action for the tank owned by ``owner_id``.

        Raises:
            KeyError: If the match or the tank does not exist
        """
        match = self.get_match(match_id)
        tank = match.get_tank(owner_id)
        if tank is None:
            raise KeyError(f"No tank for {owner_id} in match {match_id}")
        return await self.resolver.resolve(match, tank, action)
