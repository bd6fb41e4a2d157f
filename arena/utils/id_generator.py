"""
ID generation utilities.

Provides monotonic sequence numbers for audit records and random ids for
matches.
"""

import itertools
import secrets
from typing import Iterator


class IDGenerator:
    """
    Generates sequential integer ids.

    A thin wrapper around itertools.count so a match can carry its own
    counter and restore it after loading a snapshot.
    """

    def __init__(self, start: int = 1):
        self._counter: Iterator[int] = itertools.count(start)

    def next_id(self) -> int:
        """Generate the next id."""
        return next(self._counter)

    def reset(self, start: int = 1) -> None:
        self._counter = itertools.count(start)


def new_match_id() -> str:
    """Random, URL-safe match id."""
    return secrets.token_hex(6)
