"""URL classification for redirect resolution.

This module derives the category ("product" or "catalog") and the
comparison code (last path segment) of a failing URL.
"""

import logging
from typing import Optional

from redirectfinder.core.constants import CATEGORY_ORDER, UrlCategory
from redirectfinder.core.exceptions import CodeDecodeError
from redirectfinder.core.models import ClassificationResult
from redirectfinder.classifier.normalizer import URLNormalizer


logger = logging.getLogger(__name__)


class URLClassifier:
    """Classify URLs into categories and extract their codes.

    Example:
        >>> classifier = URLClassifier()
        >>> result = classifier.classify("https://shop.example/product/ABC-1")
        >>> result.category, result.code
        (<UrlCategory.PRODUCT: 'product'>, 'ABC-1')
    """

    def __init__(self, *, normalizer: Optional[URLNormalizer] = None):
        """Initialize URLClassifier.

        Args:
            normalizer: URLNormalizer instance (creates default if None)
        """
        self.normalizer = normalizer or URLNormalizer()

    def classify(self, url: str) -> ClassificationResult:
        """Classify a single URL.

        Args:
            url: URL to classify

        Returns:
            ClassificationResult; category and code are both None with
            decode_failed set when the URL encoding is malformed
        """
        try:
            code = self.extract_code(url)
        except CodeDecodeError as e:
            logger.warning(f"Skipping URL with bad encoding: {e}")
            return ClassificationResult(url=url, decode_failed=True)

        return ClassificationResult(
            url=url,
            category=self.get_category(url),
            code=code,
        )

    def get_category(self, url: str) -> Optional[UrlCategory]:
        """Determine the URL category from its path.

        Args:
            url: URL to inspect

        Returns:
            First category whose marker appears in the path, or None
        """
        path = self.normalizer.get_path(url)
        for category in CATEGORY_ORDER:
            if category.path_marker in path:
                return category
        return None

    def extract_code(self, url: str) -> Optional[str]:
        """Extract the last non-empty path segment of a URL.

        Args:
            url: URL to process

        Returns:
            Decoded last segment, or None if there is none

        Raises:
            CodeDecodeError: If the URL encoding is malformed
        """
        decoded = self.normalizer.decode(url)
        cleaned = self.normalizer.strip_trailing_slash(decoded)

        for segment in reversed(cleaned.split("/")):
            if segment:
                return segment
        return None
