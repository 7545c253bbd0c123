"""Fuzzy matching of failing codes against reference codes.

- similarity: 0-100 confidence between two codes
- best_match: Highest scoring reference code for a query
- CodeIndex: Reference set with pre-normalized codes
"""

from redirectfinder.matching.similarity import normalize_code, similarity
from redirectfinder.matching.selector import CodeIndex, best_match

__all__ = [
    "normalize_code",
    "similarity",
    "best_match",
    "CodeIndex",
]
