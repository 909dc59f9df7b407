"""Engine utilities."""

from .geo import distance_km, distance_between, coordinates_of
from .text import text_similarity, normalize_text, jaccard_similarity
from .llm_parsing import parse_llm_json, extract_list

__all__ = [
    'distance_km', 'distance_between', 'coordinates_of',
    'text_similarity', 'normalize_text', 'jaccard_similarity',
    'parse_llm_json', 'extract_list',
]
