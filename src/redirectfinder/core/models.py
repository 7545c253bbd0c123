"""Core data models for redirectfinder.

This module defines the data structures passed between the prober, the
classifier, the matcher and the store: probe results, error records,
reference codes, redirect candidates and records, and run summaries.
"""

from dataclasses import dataclass, field
from typing import Optional

from redirectfinder.core.constants import UrlCategory


# ============================================================================
# Probe Models
# ============================================================================

@dataclass(frozen=True)
class FetchResponse:
    """Raw answer of an HTTP transport after following redirects."""
    status: int
    effective_url: str


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing a single URL.

    ``status`` is None when no HTTP response was received at all.
    ``final_url`` is set only when redirects led somewhere else.
    """
    url: str
    status: Optional[int] = None
    final_url: Optional[str] = None

    @property
    def responded(self) -> bool:
        """Check if the probe produced an HTTP status."""
        return self.status is not None

    @property
    def redirected(self) -> bool:
        """Check if the probe ended on a different URL."""
        return self.final_url is not None


@dataclass
class ProbeSummary:
    """Counters of a status sweep."""
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }


# ============================================================================
# Store Records
# ============================================================================

@dataclass
class ErrorRecord:
    """A URL reported as failing, with its last known probe outcome."""
    url: str
    status: Optional[int] = None
    final_url: Optional[str] = None


@dataclass(frozen=True)
class ReferenceCode:
    """A currently valid code of a category."""
    code: str


@dataclass(frozen=True)
class RedirectCandidate:
    """Best reference code found for a failing code."""
    code: str
    percent: float


@dataclass(frozen=True)
class RedirectRecord:
    """Proposed redirect from a failing URL to a live one.

    ``source`` is always the originally failing URL, even when matching
    used the target of a redirect chain.
    """
    source: str                             # "from" in exports
    target: str                             # "to" in exports
    percent: float

    def to_dict(self) -> dict[str, object]:
        """Convert to the exported dictionary shape."""
        return {
            "from": self.source,
            "to": self.target,
            "percent": self.percent,
        }


# ============================================================================
# Classification Models
# ============================================================================

@dataclass(frozen=True)
class ClassificationResult:
    """Category and comparison code derived from a URL."""
    url: str
    category: Optional[UrlCategory] = None
    code: Optional[str] = None
    decode_failed: bool = False

    @property
    def is_resolvable(self) -> bool:
        """Check if the URL has both a category and a code."""
        return self.category is not None and bool(self.code)


# ============================================================================
# Resolution Summary
# ============================================================================

@dataclass
class ResolutionSummary:
    """Counters of a resolution sweep.

    ``skipped`` is the sum of the four finer skip counters.
    """
    processed: int = 0
    product_matches: int = 0
    catalog_matches: int = 0
    redirected_to_404: int = 0
    skipped_healthy: int = 0
    skipped_unclassified: int = 0
    skipped_decode: int = 0
    skipped_no_match: int = 0
    redirects: list[RedirectRecord] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Total number of records that produced no redirect."""
        return (
            self.skipped_healthy
            + self.skipped_unclassified
            + self.skipped_decode
            + self.skipped_no_match
        )

    @property
    def matches(self) -> int:
        """Total number of redirects produced."""
        return self.product_matches + self.catalog_matches

    def record_match(self, category: UrlCategory) -> None:
        """Count a match for a category."""
        if category == UrlCategory.PRODUCT:
            self.product_matches += 1
        else:
            self.catalog_matches += 1

    def to_dict(self) -> dict[str, int]:
        """Convert counters to dictionary."""
        return {
            "processed": self.processed,
            "product_matches": self.product_matches,
            "catalog_matches": self.catalog_matches,
            "redirected_to_404": self.redirected_to_404,
            "skipped": self.skipped,
            "skipped_healthy": self.skipped_healthy,
            "skipped_unclassified": self.skipped_unclassified,
            "skipped_decode": self.skipped_decode,
            "skipped_no_match": self.skipped_no_match,
        }


@dataclass(frozen=True)
class DeliveryReport:
    """Counts returned by the remote API after a delivery."""
    created: int
    updated: int
    total: int
