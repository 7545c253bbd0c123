"""Loading of failing URLs and reference codes from files."""

from redirectfinder.sources.loader import load_references, read_codes, read_error_urls

__all__ = [
    "load_references",
    "read_codes",
    "read_error_urls",
]
