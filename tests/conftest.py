from pathlib import Path
import asyncio
import sys

import pytest

# Add repository root to sys.path so tests can import local modules without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arena.entities import Tank
from arena.mechanics import ActionResolver
from arena.storage import SnapshotStore
from arena.world import Match


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture
def match():
    """Empty 5x5 match without persistence."""
    return Match("test-match", width=5, height=5, seed=42)


@pytest.fixture
def resolver():
    return ActionResolver()


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "matches", timeout=2.0, retries=2)


@pytest.fixture
def place(match):
    """Put a tank with explicit stats on the match board."""
    def _place(tank_id, pos, life=3, actions=0, range=2):
        tank = Tank(id=tank_id, match_id=match.id, pos=pos, life=life, actions=actions, range=range,
                    name=tank_id.title())
        match.add_tank(tank)
        return tank
    return _place


def snapshot(match):
    """Gameplay fields of every tank, for all-or-nothing checks."""
    return {t.id: (t.life, t.actions, t.range, t.pos) for t in match.get_all_tanks()}
