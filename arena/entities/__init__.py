"""
Entity definitions for the tank arena.
"""

from .tank import Tank

__all__ = [
    "Tank",
]
