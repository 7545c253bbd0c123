"""URL classification and normalization.

This package provides URL processing for redirect resolution:
- URLNormalizer: Trailing slash handling, origins, paths, strict decoding
- URLClassifier: Category and code extraction
"""

from redirectfinder.classifier.normalizer import URLNormalizer
from redirectfinder.classifier.classifier import URLClassifier

__all__ = [
    "URLNormalizer",
    "URLClassifier",
]
