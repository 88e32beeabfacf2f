from .cache import MappingCache
from .resolver import confirm_match, confirm_results, find_match, match_all
from .scoring import calculate_similarity

__all__ = [
    "MappingCache",
    "calculate_similarity",
    "confirm_match",
    "confirm_results",
    "find_match",
    "match_all",
]
