from .registry import MatchRegistry

__all__ = ["MatchRegistry"]
