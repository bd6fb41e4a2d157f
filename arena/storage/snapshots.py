"""
Durable match snapshots.

One JSON file per match under the storage directory. Each save overwrites
the previous snapshot, so repeating a save is harmless. Writes run in a
worker thread and never hold up gameplay beyond the configured timeout.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from infra.logger import get_logger

log = get_logger(__name__)


class SnapshotError(RuntimeError):
    """A snapshot could not be written."""


class SnapshotStore:
    """
    File-backed snapshot store.

    Attributes:
        root_dir: Directory holding ``<match_id>.json`` files
        timeout: Seconds allowed per write attempt
        retries: Write attempts before giving up
    """

    def __init__(self, root_dir: str | Path, timeout: float = 5.0, retries: int = 3):
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got {retries}")
        self.root_dir = Path(root_dir)
        self.timeout = timeout
        self.retries = retries

        self._generations = itertools.count(1)
        self._save_locks: Dict[str, asyncio.Lock] = {}
        self._committed: Dict[str, int] = {}
        self._commit_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> SnapshotStore:
        return cls(settings.storage_dir, timeout=settings.snapshot_timeout, retries=settings.snapshot_retries)

    def path_for(self, match_id: str) -> Path:
        if not match_id or "/" in match_id or "\\" in match_id or match_id.startswith("."):
            raise ValueError(f"Invalid match id for storage: {match_id!r}")
        return self.root_dir / f"{match_id}.json"

    async def save(self, match_id: str, snapshot: Dict[str, Any]) -> Path:
        """
        Overwrite the snapshot of ``match_id``.

        Saves of one match run one at a time. Each call takes a generation
        number up front, and a file from an older generation never replaces a
        newer one, even when a timed-out write finishes late.

        Raises:
            SnapshotError: If every attempt failed or timed out
        """
        path = self.path_for(match_id)
        payload = json.dumps(snapshot, indent=2, ensure_ascii=True)
        generation = next(self._generations)

        lock = self._save_locks.setdefault(match_id, asyncio.Lock())
        async with lock:
            return await self._save_with_retries(match_id, path, payload, generation)

    async def _save_with_retries(self, match_id: str, path: Path, payload: str, generation: int) -> Path:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.retries + 1):
            try:
                await asyncio.wait_for(
                    asyncio.to_thread(self._commit, match_id, path, payload, generation),
                    timeout=self.timeout,
                )
                log.debug("Snapshot %d of match %s written to %s", generation, match_id, path)
                return path
            except (OSError, asyncio.TimeoutError) as exc:
                last_error = exc
                log.warning(
                    "Snapshot write %d/%d for match %s failed: %r",
                    attempt, self.retries, match_id, exc,
                )

        raise SnapshotError(f"Could not persist match {match_id} after {self.retries} attempts") from last_error

    def load(self, match_id: str) -> Optional[Dict[str, Any]]:
        """Last snapshot of ``match_id``, or None if none was written."""
        path = self.path_for(match_id)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def delete(self, match_id: str) -> None:
        path = self.path_for(match_id)
        with self._commit_lock:
            self._committed.pop(match_id, None)
            if path.exists():
                path.unlink()

    def _commit(self, match_id: str, path: Path, payload: str, generation: int) -> None:
        """Write to a temp file, then rename it over ``path`` unless a newer snapshot is there."""
        tmp_path = self._write(path, payload)
        with self._commit_lock:
            if generation < self._committed.get(match_id, 0):
                tmp_path.unlink()
                log.debug("Dropped stale snapshot %d of match %s", generation, match_id)
                return
            os.replace(tmp_path, path)
            self._committed[match_id] = generation

    @staticmethod
    def _write(path: Path, payload: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(payload)
        return Path(tmp.name)
