"""Best-match selection over a reference set.

Selection is a full linear scan. A candidate only replaces the current best
when it scores strictly higher, so on ties the first candidate in input
order wins and a set where everything scores 0 yields no match.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from redirectfinder.core.models import RedirectCandidate, ReferenceCode
from redirectfinder.matching.similarity import normalize_code, score_normalized, similarity


def best_match(
    query: Optional[str],
    candidates: Optional[Sequence[ReferenceCode]],
) -> Optional[RedirectCandidate]:
    """Find the reference code most similar to a query code.

    Args:
        query: Code extracted from a failing URL
        candidates: Reference codes to scan

    Returns:
        Highest scoring candidate, or None if nothing scored above 0
    """
    if not query or not candidates:
        return None

    best: Optional[RedirectCandidate] = None
    best_percent = 0.0

    for candidate in candidates:
        if not candidate.code:
            continue

        percent = similarity(query, candidate.code)
        if percent > best_percent:
            best_percent = percent
            best = RedirectCandidate(code=candidate.code, percent=percent)

    return best


class CodeIndex:
    """Reference set with codes normalized once up front.

    Returns exactly what best_match() returns for the same candidates,
    including tie-breaks, without re-normalizing every candidate for
    every query.
    """

    def __init__(self, candidates: Iterable[ReferenceCode]) -> None:
        """Initialize index.

        Args:
            candidates: Reference codes, in the order used for tie-breaks
        """
        self._entries: list[tuple[str, str]] = [
            (candidate.code, normalize_code(candidate.code))
            for candidate in candidates
            if candidate.code
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def best_match(self, query: Optional[str]) -> Optional[RedirectCandidate]:
        """Find the indexed code most similar to a query code.

        Args:
            query: Code extracted from a failing URL

        Returns:
            Highest scoring candidate, or None if nothing scored above 0
        """
        if not query or not self._entries:
            return None

        normalized_query = normalize_code(query)
        best: Optional[RedirectCandidate] = None
        best_percent = 0.0

        for code, normalized in self._entries:
            percent = score_normalized(normalized_query, normalized)
            if percent > best_percent:
                best_percent = percent
                best = RedirectCandidate(code=code, percent=percent)

        return best
