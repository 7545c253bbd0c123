"""URL normalization helpers.

This module provides the small amount of URL normalization the pipeline
needs:
- Trailing slash handling for redirect comparison
- Origin extraction for building redirect targets
- Path extraction for API delivery
- Strict percent-decoding
"""

import re
from typing import Optional
from urllib.parse import unquote, urlsplit, urlunsplit

from redirectfinder.core.exceptions import CodeDecodeError


# A "%" that does not start a two-digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_ORIGIN_PREFIX = re.compile(r"^https?://[^/]+", re.IGNORECASE)


class URLNormalizer:
    """Normalize URLs for comparison and target construction."""

    def strip_trailing_slash(self, url: str) -> str:
        """Remove a single trailing slash.

        Args:
            url: URL to process

        Returns:
            URL without its last trailing slash
        """
        if url.endswith("/"):
            return url[:-1]
        return url

    def same_location(self, first: str, second: str) -> bool:
        """Check if two URLs point to the same location.

        Only a single trailing slash is ignored; everything else must
        match exactly.

        Args:
            first: URL to compare
            second: URL to compare

        Returns:
            True if both URLs are equal after trailing slash removal
        """
        return self.strip_trailing_slash(first) == self.strip_trailing_slash(second)

    def get_origin(self, url: str) -> Optional[str]:
        """Extract scheme and host from a URL.

        Args:
            url: URL to process

        Returns:
            Origin such as "https://example.com", or None if the URL has
            no scheme or host
        """
        parsed = urlsplit(url)
        if not parsed.scheme or not parsed.netloc:
            return None
        return urlunsplit((parsed.scheme.lower(), parsed.netloc.lower(), "", "", ""))

    def get_path(self, url: str) -> str:
        """Get the path of a URL as used by the site.

        Args:
            url: URL to process

        Returns:
            Path component, or empty string if the URL cannot be parsed
        """
        try:
            return urlsplit(url).path
        except ValueError:
            return ""

    def to_relative(self, url: str) -> str:
        """Strip scheme and host, keeping path, query and fragment.

        Values that are not absolute http(s) URLs are returned unchanged.

        Args:
            url: Absolute URL or path

        Returns:
            Site-relative reference, "/" when nothing is left
        """
        if not url.lower().startswith("http"):
            return url
        return _ORIGIN_PREFIX.sub("", url) or "/"

    def decode(self, url: str) -> str:
        """Percent-decode a URL strictly.

        Args:
            url: URL to decode

        Returns:
            Decoded URL

        Raises:
            CodeDecodeError: If an escape is malformed or decodes to
                invalid UTF-8
        """
        if _MALFORMED_ESCAPE.search(url):
            raise CodeDecodeError(f"Malformed percent-encoding in URL: {url}")

        try:
            return unquote(url, errors="strict")
        except UnicodeDecodeError as e:
            raise CodeDecodeError(f"Invalid UTF-8 escape in URL {url}: {e}") from e
