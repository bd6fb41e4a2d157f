"""
Mechanics module - action resolution.

- ActionResolver: validates and applies tank actions
- ResolutionResult: applied action plus validation outcome
"""

from .resolver import ActionResolver, ResolutionResult

__all__ = [
    "ActionResolver",
    "ResolutionResult",
]
