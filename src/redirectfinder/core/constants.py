"""Constants used throughout redirectfinder.

This module contains enums, default values, and static configurations
to ensure consistency across the application.
"""

from enum import Enum


class UrlCategory(Enum):
    """URL categories that have a reference set of valid codes."""
    PRODUCT = "product"
    CATALOG = "catalog"

    @property
    def path_marker(self) -> str:
        """Path segment that identifies the category in a URL."""
        return f"/{self.value}/"


class ResolutionOutcome(Enum):
    """Outcome of resolving a single error record."""
    MATCHED = "matched"
    SKIPPED_HEALTHY = "skipped_healthy"
    SKIPPED_UNCLASSIFIED = "skipped_unclassified"
    SKIPPED_DECODE = "skipped_decode"
    SKIPPED_NO_MATCH = "skipped_no_match"


# Category lookup order matters: product wins when both markers are present
CATEGORY_ORDER = (UrlCategory.PRODUCT, UrlCategory.CATALOG)

# Records with a status at or above this value are resolved
ERROR_STATUS_THRESHOLD = 400

# Re-probe status that marks a redirect target as broken itself
NOT_FOUND_STATUS = 404

# Characters removed from codes before comparison, applied in this order
CODE_NOISE_TOKENS = ("x", "kh")

USER_AGENT = "redirectfinder/0.1 (+status-probe)"


# Application-wide defaults
DEFAULTS = {
    "timeout": 10.0,
    "max_redirects": 5,
    "concurrency": 10,
    "batch_pause": 0.1,
    "base_url": None,
    "db_path": "redirects.db",
    "errors_file": "data/pages_error.json",
    "products_file": "data/products.json",
    "catalog_file": "data/catalog.json",
    "result_file": "result.json",
    "delivery_timeout": 30.0,
    "probe_log_every": 100,
    "resolve_log_every": 1000,
}
