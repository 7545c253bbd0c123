"""Similarity scoring for product and catalog codes.

Codes are romanized from another alphabet, so the same code shows up with
"x" and "kh" spelling variants. Both are removed before the edit distance
is measured, which makes such variants score 100.
"""

from typing import Optional

from rapidfuzz.distance import Levenshtein

from redirectfinder.core.constants import CODE_NOISE_TOKENS


def normalize_code(code: Optional[str]) -> str:
    """Normalize a code for comparison.

    Args:
        code: Raw code (may be None or empty)

    Returns:
        Lowercased code with every noise token removed
    """
    if not code:
        return ""

    normalized = code.lower()
    for token in CODE_NOISE_TOKENS:
        normalized = normalized.replace(token, "")
    return normalized


def score_normalized(left: str, right: str) -> float:
    """Score two already-normalized codes.

    Args:
        left: Normalized code
        right: Normalized code

    Returns:
        Confidence in [0, 100]
    """
    if left == right:
        return 100.0

    max_length = max(len(left), len(right))
    if max_length == 0:
        return 100.0

    distance = Levenshtein.distance(left, right)
    percent = (1 - distance / max_length) * 100
    return max(0.0, min(100.0, percent))


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Compute the confidence that two codes denote the same item.

    Args:
        a: First code
        b: Second code

    Returns:
        Confidence in [0, 100]; 0 when either code is empty
    """
    if not a or not b:
        return 0.0

    return score_normalized(normalize_code(a), normalize_code(b))
