from .id_generator import IDGenerator, new_match_id

__all__ = ["IDGenerator", "new_match_id"]
